"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field
from datetime import date
from typing import List, Literal, Optional

from ledger_gateway.domain.models import (
    AmortizationSchedule,
    EntryCreate,
    EntryUpdate,
    InstallmentChild,
    InstallmentParent,
    InstallmentSchedule,
    LedgerEntry,
)

EntryType = Literal["income", "expense"]


class EntryCreateRequest(BaseModel):
    """Request body for POST /v1/workspaces/{workspace_id}/entries"""

    entry_date: date
    type: EntryType
    amount: int = Field(..., gt=0, description="Plain amount, or total principal of an installment purchase")
    category_id: Optional[int] = None
    description: str = ""
    is_installment: bool = False
    installment_months: Optional[int] = Field(None, ge=2, description="Required when is_installment is set")
    card_issuer: Optional[str] = None
    defer_to_next_month: bool = False

    def to_domain(self, workspace_id: str) -> EntryCreate:
        return EntryCreate(
            workspace_id=workspace_id,
            entry_date=self.entry_date,
            type=self.type,
            principal=self.amount,
            category_id=self.category_id,
            description=self.description,
            is_installment=self.is_installment,
            months=self.installment_months,
            issuer=self.card_issuer,
            defer_to_next_month=self.defer_to_next_month,
        )


class EntryUpdateRequest(BaseModel):
    """Request body for PATCH /v1/workspaces/{workspace_id}/entries/{entry_id}"""

    entry_date: Optional[date] = None
    type: Optional[EntryType] = None
    amount: Optional[int] = Field(None, gt=0)
    category_id: Optional[int] = None
    description: Optional[str] = None
    is_installment: Optional[bool] = None
    installment_months: Optional[int] = Field(None, ge=2)
    card_issuer: Optional[str] = None
    defer_to_next_month: bool = False

    def to_domain(self) -> EntryUpdate:
        return EntryUpdate(
            entry_date=self.entry_date,
            type=self.type,
            principal=self.amount,
            category_id=self.category_id,
            description=self.description,
            is_installment=self.is_installment,
            months=self.installment_months,
            issuer=self.card_issuer,
            # Explicit null removes the issuer; omitting the field keeps it
            clear_issuer="card_issuer" in self.model_fields_set and self.card_issuer is None,
            defer_to_next_month=self.defer_to_next_month,
        )


class EntryResponse(BaseModel):
    """Single ledger entry in any role"""

    id: int
    role: Literal["standalone", "installment_parent", "installment_child"]
    entry_date: date
    type: EntryType
    amount: int
    category_id: Optional[int] = None
    description: str = ""
    installment_months: Optional[int] = None
    card_issuer: Optional[str] = None
    estimated_total_fee: Optional[int] = None
    fee_estimation_strategy: Optional[str] = None
    parent_id: Optional[int] = None
    installment_index: Optional[int] = None

    @classmethod
    def from_entry(cls, entry: LedgerEntry) -> "EntryResponse":
        if isinstance(entry, InstallmentParent):
            return cls(
                id=entry.id,
                role="installment_parent",
                entry_date=entry.purchase_date,
                type=entry.type,
                amount=entry.total_principal,
                category_id=entry.category_id,
                description=entry.description,
                installment_months=entry.months,
                card_issuer=entry.issuer,
                estimated_total_fee=entry.estimated_total_fee,
                fee_estimation_strategy=entry.strategy.value,
            )
        if isinstance(entry, InstallmentChild):
            return cls(
                id=entry.id,
                role="installment_child",
                entry_date=entry.payment_date,
                type=entry.type,
                amount=entry.period_amount,
                category_id=entry.category_id,
                description=entry.description,
                parent_id=entry.parent_id,
                installment_index=entry.period_index,
            )
        return cls(
            id=entry.id,
            role="standalone",
            entry_date=entry.entry_date,
            type=entry.type,
            amount=entry.amount,
            category_id=entry.category_id,
            description=entry.description,
        )


class InstallmentSchema(BaseModel):
    """Single installment payment with its principal/fee breakdown"""

    installment_index: int
    payment_date: date
    amount: int
    principal: int
    fee: int
    entry_id: Optional[int] = None


class ScheduleResponse(BaseModel):
    """Response for GET /v1/workspaces/{workspace_id}/entries/{entry_id}/schedule"""

    parent: EntryResponse
    installments: List[InstallmentSchema]

    @classmethod
    def from_schedule(cls, schedule: InstallmentSchedule) -> "ScheduleResponse":
        return cls(
            parent=EntryResponse.from_entry(schedule.parent),
            installments=[
                InstallmentSchema(
                    installment_index=item.child.period_index,
                    payment_date=item.child.payment_date,
                    amount=item.child.period_amount,
                    principal=item.principal,
                    fee=item.fee,
                    entry_id=item.child.id,
                )
                for item in schedule.children
            ],
        )


class DeleteResponse(BaseModel):
    """Response for DELETE /v1/workspaces/{workspace_id}/entries/{entry_id}"""

    entry_id: int
    rows_deleted: int


class QuoteRequest(BaseModel):
    """Request body for POST /v1/installments/quote"""

    amount: int = Field(..., gt=0)
    installment_months: int = Field(..., ge=2)
    purchase_date: date
    card_issuer: Optional[str] = None
    estimation: Optional[Literal["min", "average", "max"]] = None


class QuoteResponse(BaseModel):
    """Unsaved schedule preview"""

    annual_rate: float
    estimated_total_fee: int
    total_amount: int
    installments: List[InstallmentSchema]

    @classmethod
    def from_schedule(cls, schedule: AmortizationSchedule) -> "QuoteResponse":
        return cls(
            annual_rate=schedule.annual_rate,
            estimated_total_fee=schedule.total_fee,
            total_amount=schedule.total_amount,
            installments=[
                InstallmentSchema(
                    installment_index=p.index,
                    payment_date=p.payment_date,
                    amount=p.amount,
                    principal=p.principal,
                    fee=p.fee,
                )
                for p in schedule.periods
            ],
        )


class CardIssuersResponse(BaseModel):
    """Response for GET /v1/card-issuers"""

    issuers: List[str]
