"""Data access layer for ledger entries"""

from typing import Callable, List, Optional
from sqlalchemy.orm import Session
from ledger_gateway.infrastructure.database.models import LedgerEntryRecord
from ledger_gateway.domain.exceptions import CorruptEntryError, InstallmentValidationError
from ledger_gateway.domain.models import (
    AmortizationSchedule,
    InstallmentChild,
    InstallmentParent,
    LedgerEntry,
    Standalone,
)
from ledger_gateway.domain.rates import EstimationStrategy


def _stored_strategy(record: LedgerEntryRecord) -> EstimationStrategy:
    # Rows written before the column existed were estimated with max
    try:
        return EstimationStrategy.parse(record.fee_estimation_strategy or EstimationStrategy.MAX)
    except InstallmentValidationError:
        raise CorruptEntryError(
            f"Installment parent {record.id} has unknown fee strategy {record.fee_estimation_strategy!r}"
        ) from None


def entry_from_record(record: LedgerEntryRecord) -> LedgerEntry:
    """Map a stored row onto exactly one entry role"""
    if not record.is_installment:
        if record.parent_id is not None:
            raise CorruptEntryError(f"Entry {record.id} references a parent but is not an installment")
        return Standalone(
            id=record.id,
            workspace_id=record.workspace_id,
            entry_date=record.entry_date,
            type=record.type,
            amount=record.amount,
            category_id=record.category_id,
            description=record.description or "",
        )

    if record.parent_id is None:
        if record.installment_months is None or record.total_principal is None:
            raise CorruptEntryError(f"Installment parent {record.id} is missing schedule fields")
        return InstallmentParent(
            id=record.id,
            workspace_id=record.workspace_id,
            purchase_date=record.entry_date,
            total_principal=record.total_principal,
            months=record.installment_months,
            issuer=record.card_issuer,
            estimated_total_fee=record.estimated_total_fee or 0,
            category_id=record.category_id,
            description=record.description or "",
            type=record.type,
            strategy=_stored_strategy(record),
        )

    if record.installment_index is None:
        raise CorruptEntryError(f"Installment child {record.id} has no period index")
    return InstallmentChild(
        id=record.id,
        workspace_id=record.workspace_id,
        parent_id=record.parent_id,
        period_index=record.installment_index,
        payment_date=record.entry_date,
        period_amount=record.amount,
        category_id=record.category_id,
        description=record.description or "",
        type=record.type,
    )


class LedgerEntryRepository:
    """Repository for ledger entries and their generated installment children"""

    def __init__(self, db: Session):
        self.db = db

    def get_record(self, entry_id: int, workspace_id: str) -> Optional[LedgerEntryRecord]:
        """Fetch a row scoped to its workspace"""
        return (
            self.db.query(LedgerEntryRecord)
            .filter(LedgerEntryRecord.id == entry_id, LedgerEntryRecord.workspace_id == workspace_id)
            .first()
        )

    def get_entry(self, entry_id: int, workspace_id: str) -> Optional[LedgerEntry]:
        record = self.get_record(entry_id, workspace_id)
        return entry_from_record(record) if record is not None else None

    def add(self, record: LedgerEntryRecord) -> LedgerEntryRecord:
        self.db.add(record)
        self.db.flush()  # Get ID without committing
        return record

    def create_children(
        self,
        parent: LedgerEntryRecord,
        schedule: AmortizationSchedule,
        describe: Callable[[int], str],
    ) -> List[LedgerEntryRecord]:
        """Bulk-insert one child row per schedule period"""
        children = [
            LedgerEntryRecord(
                workspace_id=parent.workspace_id,
                entry_date=period.payment_date,
                type=parent.type,
                amount=period.amount,
                description=describe(period.index),
                category_id=parent.category_id,
                is_installment=True,
                installment_index=period.index,
                parent_id=parent.id,
            )
            for period in schedule.periods
        ]
        self.db.add_all(children)
        self.db.flush()
        return children

    def get_children(self, parent_id: int, workspace_id: str) -> List[InstallmentChild]:
        """Children of a parent ordered by period index"""
        return [entry_from_record(r) for r in self.child_records(parent_id, workspace_id)]

    def child_records(self, parent_id: int, workspace_id: str) -> List[LedgerEntryRecord]:
        return (
            self.db.query(LedgerEntryRecord)
            .filter(LedgerEntryRecord.parent_id == parent_id, LedgerEntryRecord.workspace_id == workspace_id)
            .order_by(LedgerEntryRecord.installment_index)
            .all()
        )

    def count_children(self, parent_id: int, workspace_id: str) -> int:
        return (
            self.db.query(LedgerEntryRecord)
            .filter(LedgerEntryRecord.parent_id == parent_id, LedgerEntryRecord.workspace_id == workspace_id)
            .count()
        )

    def delete_children(self, parent_id: int, workspace_id: str) -> int:
        """Delete every child referencing parent_id; returns the number removed"""
        deleted = (
            self.db.query(LedgerEntryRecord)
            .filter(LedgerEntryRecord.parent_id == parent_id, LedgerEntryRecord.workspace_id == workspace_id)
            .delete(synchronize_session="fetch")
        )
        self.db.flush()
        return deleted

    def delete(self, record: LedgerEntryRecord) -> None:
        self.db.delete(record)
        self.db.flush()
