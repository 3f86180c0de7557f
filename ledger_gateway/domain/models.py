"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Union

from ledger_gateway.domain.rates import EstimationStrategy

INCOME = "income"
EXPENSE = "expense"
ENTRY_TYPES = (INCOME, EXPENSE)


@dataclass(frozen=True)
class Standalone:
    """Plain ledger entry with no schedule attached"""

    id: Optional[int]
    workspace_id: str
    entry_date: date
    type: str  # "income" or "expense"
    amount: int
    category_id: Optional[int] = None
    description: str = ""


@dataclass(frozen=True)
class InstallmentParent:
    """Card purchase paid over `months` monthly installments"""

    id: Optional[int]
    workspace_id: str
    purchase_date: date
    total_principal: int
    months: int
    issuer: Optional[str]
    estimated_total_fee: int
    category_id: Optional[int] = None
    description: str = ""
    type: str = EXPENSE
    strategy: EstimationStrategy = EstimationStrategy.MAX  # rate estimate the children were written with

    @property
    def amount(self) -> int:
        return self.total_principal


@dataclass(frozen=True)
class InstallmentChild:
    """One generated payment of a parent's schedule; its fee is derived, never stored"""

    id: Optional[int]
    workspace_id: str
    parent_id: int
    period_index: int
    payment_date: date
    period_amount: int
    category_id: Optional[int] = None
    description: str = ""
    type: str = EXPENSE


LedgerEntry = Union[Standalone, InstallmentParent, InstallmentChild]


@dataclass(frozen=True)
class SchedulePeriod:
    """Single period of an amortization schedule"""

    index: int  # 1-based
    period_start: date
    payment_date: date
    days: int
    principal: int
    fee: int

    @property
    def amount(self) -> int:
        """Settlement amount stored on the child entry"""
        return self.principal + self.fee


@dataclass(frozen=True)
class AmortizationSchedule:
    """Full per-period breakdown of an installment purchase"""

    principal: int
    months: int
    purchase_date: date
    annual_rate: float
    periods: List[SchedulePeriod] = field(default_factory=list)

    @property
    def total_fee(self) -> int:
        # Sum of independently rounded period fees
        return sum(p.fee for p in self.periods)

    @property
    def total_amount(self) -> int:
        return sum(p.amount for p in self.periods)


@dataclass
class EntryCreate:
    """Already-validated creation request from a calling service"""

    workspace_id: str
    entry_date: date
    type: str
    principal: int
    category_id: Optional[int] = None
    description: str = ""
    is_installment: bool = False
    months: Optional[int] = None
    issuer: Optional[str] = None
    defer_to_next_month: bool = False  # one-time card charge billed next month


@dataclass
class EntryUpdate:
    """
    Partial update; None means the field was not supplied.

    `clear_issuer` removes the card issuer, which None alone cannot express.
    """

    entry_date: Optional[date] = None
    type: Optional[str] = None
    principal: Optional[int] = None
    category_id: Optional[int] = None
    description: Optional[str] = None
    is_installment: Optional[bool] = None
    months: Optional[int] = None
    issuer: Optional[str] = None
    clear_issuer: bool = False
    defer_to_next_month: bool = False

    def resolve_issuer(self, current: Optional[str]) -> Optional[str]:
        if self.clear_issuer:
            return None
        return self.issuer if self.issuer is not None else current

    def schedule_fields(self) -> dict:
        """Supplied fields that define a schedule"""
        candidates = {
            "entry_date": self.entry_date,
            "type": self.type,
            "principal": self.principal,
            "is_installment": self.is_installment,
            "months": self.months,
            "issuer": self.issuer,
        }
        fields = {name: value for name, value in candidates.items() if value is not None}
        if self.clear_issuer:
            fields["issuer"] = None
        return fields


@dataclass(frozen=True)
class ChildWithFee:
    """Child entry paired with its read-time fee component"""

    child: InstallmentChild
    fee: int

    @property
    def principal(self) -> int:
        return self.child.period_amount - self.fee


@dataclass(frozen=True)
class InstallmentSchedule:
    """Persisted parent together with its ordered children"""

    parent: InstallmentParent
    children: List[ChildWithFee]
