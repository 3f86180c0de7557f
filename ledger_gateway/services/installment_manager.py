"""Lifecycle of installment parents and their generated child entries"""

from contextlib import contextmanager
from typing import Iterator, List, Optional

from sqlalchemy.orm import Session

from ledger_gateway.config import settings
from ledger_gateway.domain.exceptions import (
    EntryNotFoundError,
    InstallmentValidationError,
    ScheduleIntegrityError,
)
from ledger_gateway.domain.installments import build_schedule, installment_fee_only
from ledger_gateway.domain.models import (
    ENTRY_TYPES,
    EXPENSE,
    AmortizationSchedule,
    ChildWithFee,
    EntryCreate,
    EntryUpdate,
    InstallmentChild,
    InstallmentParent,
    InstallmentSchedule,
    LedgerEntry,
)
from ledger_gateway.domain.rates import EstimationStrategy, is_supported_issuer
from ledger_gateway.infrastructure.database.models import LedgerEntryRecord
from ledger_gateway.infrastructure.database.repositories import LedgerEntryRepository, entry_from_record
from ledger_gateway.infrastructure.observability.logging import (
    log_entry_deleted,
    log_rollback,
    log_schedule_materialized,
)
from ledger_gateway.infrastructure.observability.metrics import (
    children_deleted_counter,
    record_schedule,
    rollback_counter,
)
from ledger_gateway.utils.date_utils import one_time_card_shift_date


def child_description(base: str, index: int, months: int) -> str:
    """Label of the index-th generated payment, e.g. 'Laptop (2/6)'"""
    return f"{base} ({index}/{months})"


class InstallmentRecordManager:
    """
    Creates, regenerates and deletes ledger entries so that every
    installment parent always owns exactly `months` children.

    Every multi-row transition runs in one database transaction: it either
    commits the parent with its full child set or rolls back entirely.
    """

    def __init__(
        self,
        db: Session,
        strategy: "str | EstimationStrategy | None" = None,
        require_issuer: Optional[bool] = None,
        installment_label: Optional[str] = None,
    ):
        self.db = db
        self.entries = LedgerEntryRepository(db)
        self.strategy = EstimationStrategy.parse(strategy or settings.fee_estimation_strategy)
        self.require_issuer = settings.require_card_issuer if require_issuer is None else require_issuer
        self.installment_label = installment_label or settings.default_installment_label

    # Transitions

    def create_entry(self, request: EntryCreate) -> LedgerEntry:
        """Persist a standalone entry, or an installment parent with its children"""
        self._validate_entry(request.type, request.principal)

        if request.is_installment:
            self._validate_installment(request.type, request.principal, request.months, request.issuer)
            schedule = build_schedule(
                request.principal, request.months, request.entry_date, request.issuer, self.strategy
            )
            record = LedgerEntryRecord(
                workspace_id=request.workspace_id,
                entry_date=request.entry_date,
                type=request.type,
                description=request.description or "",
                category_id=request.category_id,
            )
            with self._transaction(request.workspace_id):
                self._apply_schedule(record, schedule, request.issuer, self.strategy)
                self.entries.add(record)
                self._write_children(record, schedule)

            record_schedule("create", schedule.total_fee)
            log_schedule_materialized(request.workspace_id, record.id, "create", schedule.months, schedule.total_fee)
            return entry_from_record(record)

        entry_date = request.entry_date
        if request.defer_to_next_month and request.issuer:
            entry_date = one_time_card_shift_date(entry_date)

        record = LedgerEntryRecord(
            workspace_id=request.workspace_id,
            entry_date=entry_date,
            type=request.type,
            amount=request.principal,
            description=request.description or "",
            category_id=request.category_id,
            is_installment=False,
        )
        with self._transaction(request.workspace_id):
            self.entries.add(record)
        return entry_from_record(record)

    def update_entry(self, entry_id: int, workspace_id: str, update: EntryUpdate) -> LedgerEntry:
        """
        Apply a partial update.

        A parent whose schedule-defining fields change has all of its
        children deleted and regenerated from scratch. Children accept only
        description and category edits.
        """
        record = self._require_record(entry_id, workspace_id)
        current = entry_from_record(record)

        if isinstance(current, InstallmentChild):
            return self._update_child(record, current, update)

        new_type = update.type or record.type
        self._validate_entry(new_type, update.principal if update.principal is not None else record.amount)

        is_installment = update.is_installment if update.is_installment is not None else record.is_installment
        if is_installment:
            return self._update_installment(record, current, update, new_type)
        return self._update_standalone(record, current, update, new_type)

    def delete_entry(self, entry_id: int, workspace_id: str) -> int:
        """Delete an entry; a parent takes its children with it. Returns rows removed."""
        record = self._require_record(entry_id, workspace_id)
        current = entry_from_record(record)

        children_deleted = 0
        with self._transaction(workspace_id, entry_id):
            if isinstance(current, InstallmentParent):
                children_deleted = self.entries.delete_children(entry_id, workspace_id)
            self.entries.delete(record)

        if children_deleted:
            children_deleted_counter.inc(children_deleted)
        log_entry_deleted(workspace_id, entry_id, type(current).__name__, children_deleted)
        return children_deleted + 1

    # Reads

    def get_entry(self, entry_id: int, workspace_id: str) -> LedgerEntry:
        return entry_from_record(self._require_record(entry_id, workspace_id))

    def list_children(self, parent_id: int, workspace_id: str) -> List[InstallmentChild]:
        return self.entries.get_children(parent_id, workspace_id)

    def get_schedule(self, parent_id: int, workspace_id: str) -> InstallmentSchedule:
        """Parent plus its ordered children, each with its derived fee"""
        parent = self.get_entry(parent_id, workspace_id)
        if not isinstance(parent, InstallmentParent):
            raise InstallmentValidationError(f"Entry {parent_id} is not an installment purchase")

        children = [
            ChildWithFee(child=child, fee=self._fee_for(parent, child))
            for child in self.entries.get_children(parent_id, workspace_id)
        ]
        return InstallmentSchedule(parent=parent, children=children)

    def child_fee(self, child: InstallmentChild) -> int:
        """Fee component of a child's settlement amount; no storage writes"""
        parent = self.get_entry(child.parent_id, child.workspace_id)
        if not isinstance(parent, InstallmentParent):
            raise EntryNotFoundError(f"Installment parent {child.parent_id} not found")
        return self._fee_for(parent, child)

    # Internals

    def _fee_for(self, parent: InstallmentParent, child: InstallmentChild) -> int:
        # Same strategy the stored period_amount was computed with
        return installment_fee_only(
            parent.total_principal,
            parent.months,
            child.period_index,
            parent.purchase_date,
            parent.issuer,
            parent.strategy,
        )

    def _update_installment(
        self,
        record: LedgerEntryRecord,
        current: LedgerEntry,
        update: EntryUpdate,
        new_type: str,
    ) -> LedgerEntry:
        was_parent = isinstance(current, InstallmentParent)
        months = update.months if update.months is not None else record.installment_months
        principal = update.principal if update.principal is not None else current.amount
        issuer = update.resolve_issuer(record.card_issuer)
        purchase_date = update.entry_date or record.entry_date
        self._validate_installment(new_type, principal, months, issuer)

        schedule_changed = not was_parent or (
            (principal, months, issuer, purchase_date)
            != (current.total_principal, current.months, current.issuer, current.purchase_date)
        )

        if not schedule_changed:
            # Labels only; children follow the parent's description and category
            with self._transaction(record.workspace_id, record.id):
                self._apply_labels(record, update)
                for child in self.entries.child_records(record.id, record.workspace_id):
                    child.description = child_description(self._label(record), child.installment_index, months)
                    child.category_id = record.category_id
                self.db.flush()
            return entry_from_record(record)

        # Compute before any row is touched
        schedule = build_schedule(principal, months, purchase_date, issuer, self.strategy)

        children_deleted = 0
        with self._transaction(record.workspace_id, record.id):
            if was_parent:
                children_deleted = self.entries.delete_children(record.id, record.workspace_id)
            self._apply_labels(record, update)
            record.type = new_type
            record.entry_date = purchase_date
            self._apply_schedule(record, schedule, issuer, self.strategy)
            self.db.flush()
            self._write_children(record, schedule)

        record_schedule("update", schedule.total_fee, children_deleted)
        log_schedule_materialized(
            record.workspace_id, record.id, "update", schedule.months, schedule.total_fee, children_deleted
        )
        return entry_from_record(record)

    def _update_standalone(
        self,
        record: LedgerEntryRecord,
        current: LedgerEntry,
        update: EntryUpdate,
        new_type: str,
    ) -> LedgerEntry:
        was_parent = isinstance(current, InstallmentParent)
        amount = update.principal if update.principal is not None else current.amount

        entry_date = update.entry_date
        if entry_date is not None and update.defer_to_next_month and update.issuer:
            entry_date = one_time_card_shift_date(entry_date)

        children_deleted = 0
        with self._transaction(record.workspace_id, record.id):
            if was_parent:
                children_deleted = self.entries.delete_children(record.id, record.workspace_id)
            self._apply_labels(record, update)
            record.type = new_type
            record.amount = amount
            if entry_date is not None:
                record.entry_date = entry_date
            record.is_installment = False
            record.installment_months = None
            record.installment_index = None
            record.total_principal = None
            record.card_issuer = None
            record.estimated_total_fee = None
            record.fee_estimation_strategy = None
            record.parent_id = None
            self.db.flush()

        if children_deleted:
            children_deleted_counter.inc(children_deleted)
            log_entry_deleted(record.workspace_id, record.id, "converted_to_standalone", children_deleted)
        return entry_from_record(record)

    def _update_child(self, record: LedgerEntryRecord, child: InstallmentChild, update: EntryUpdate) -> LedgerEntry:
        parent = self.entries.get_entry(child.parent_id, child.workspace_id)
        current = {
            "entry_date": child.payment_date,
            "type": child.type,
            "principal": child.period_amount,
            "is_installment": True,
            "months": parent.months if isinstance(parent, InstallmentParent) else None,
            "issuer": parent.issuer if isinstance(parent, InstallmentParent) else None,
        }
        for name, value in update.schedule_fields().items():
            if value != current[name]:
                raise InstallmentValidationError(
                    f"Cannot change {name} of installment {child.period_index}; edit entry {child.parent_id} instead"
                )

        with self._transaction(record.workspace_id, record.id):
            self._apply_labels(record, update)
            self.db.flush()
        return entry_from_record(record)

    def _apply_schedule(
        self,
        record: LedgerEntryRecord,
        schedule: AmortizationSchedule,
        issuer: Optional[str],
        strategy: EstimationStrategy,
    ) -> None:
        record.is_installment = True
        record.parent_id = None
        record.installment_index = None
        record.installment_months = schedule.months
        record.total_principal = schedule.principal
        record.amount = schedule.principal
        record.card_issuer = issuer
        record.estimated_total_fee = schedule.total_fee
        record.fee_estimation_strategy = strategy.value

    def _write_children(self, record: LedgerEntryRecord, schedule: AmortizationSchedule) -> None:
        label = self._label(record)
        self.entries.create_children(
            record, schedule, lambda index: child_description(label, index, schedule.months)
        )
        written = self.entries.count_children(record.id, record.workspace_id)
        if written != schedule.months:
            raise ScheduleIntegrityError(
                f"Entry {record.id} has {written} installment children, expected {schedule.months}"
            )

    def _apply_labels(self, record: LedgerEntryRecord, update: EntryUpdate) -> None:
        if update.description is not None:
            record.description = update.description
        if update.category_id is not None:
            record.category_id = update.category_id

    def _label(self, record: LedgerEntryRecord) -> str:
        return record.description or self.installment_label

    def _require_record(self, entry_id: int, workspace_id: str) -> LedgerEntryRecord:
        record = self.entries.get_record(entry_id, workspace_id)
        if record is None:
            raise EntryNotFoundError(f"Ledger entry {entry_id} not found in workspace {workspace_id}")
        return record

    def _validate_entry(self, entry_type: str, principal: Optional[int]) -> None:
        if entry_type not in ENTRY_TYPES:
            raise InstallmentValidationError(f"Unknown entry type: {entry_type!r}")
        if principal is None or principal <= 0:
            raise InstallmentValidationError("Amount must be greater than 0")

    def _validate_installment(
        self,
        entry_type: str,
        principal: Optional[int],
        months: Optional[int],
        issuer: Optional[str],
    ) -> None:
        if entry_type != EXPENSE:
            raise InstallmentValidationError("Only expense entries can be paid in installments")
        if months is None or months < 2:
            raise InstallmentValidationError("Installment months must be at least 2")
        if principal is None or principal <= 0:
            raise InstallmentValidationError("Installment amount must be greater than 0")
        if self.require_issuer and not is_supported_issuer(issuer):
            raise InstallmentValidationError(f"Unsupported or missing card issuer: {issuer!r}")

    @contextmanager
    def _transaction(self, workspace_id: str, entry_id: Optional[int] = None) -> Iterator[None]:
        """Commit on success; roll back every staged row on any failure"""
        try:
            yield
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            if isinstance(e, InstallmentValidationError):
                reason = "validation"
            elif isinstance(e, ScheduleIntegrityError):
                reason = "integrity"
            else:
                reason = "storage"
            rollback_counter.labels(reason=reason).inc()
            log_rollback(workspace_id, entry_id, reason, e)
            raise
