"""Annual percentage rate resolution for card installment purchases"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from ledger_gateway.domain.exceptions import InstallmentValidationError

HYUNDAI_CARD = "Hyundai Card"
OTHER_ISSUER = "Other"


class EstimationStrategy(str, Enum):
    """Which end of an issuer's published APR range to assume"""

    MIN = "min"
    AVERAGE = "average"
    MAX = "max"

    @classmethod
    def parse(cls, value: "str | EstimationStrategy") -> "EstimationStrategy":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InstallmentValidationError(f"Unknown fee estimation strategy: {value!r}") from None


@dataclass(frozen=True)
class IssuerRates:
    """Published installment APR range for a card issuer (example data)"""

    min_apr: float
    max_apr: float
    reference_date: Optional[str] = None


CARD_INSTALLMENT_RATES: Dict[str, IssuerRates] = {
    HYUNDAI_CARD: IssuerRates(min_apr=7.9, max_apr=19.9, reference_date="2024-11-01"),
    OTHER_ISSUER: IssuerRates(min_apr=10.0, max_apr=19.9),
}

# (first month, last month, APR) - months outside every bracket are fee-free
HYUNDAI_CARD_BRACKETS: List[Tuple[int, int, float]] = [
    (2, 3, 0.0),
    (4, 5, 12.0),
    (6, 9, 15.0),
    (10, 12, 19.0),
]


def supported_card_issuers() -> List[str]:
    """Issuer identifiers offered to installment forms"""
    return list(CARD_INSTALLMENT_RATES)


def is_supported_issuer(issuer: Optional[str]) -> bool:
    return bool(issuer) and issuer in CARD_INSTALLMENT_RATES


def resolve_annual_rate(
    issuer: Optional[str],
    months: int,
    strategy: "str | EstimationStrategy" = EstimationStrategy.MAX,
) -> float:
    """
    Resolve the annual percentage rate for an installment purchase.

    Hyundai Card uses a stepped bracket table keyed by month count; any
    other known issuer uses its min/max range according to strategy.
    Unknown or absent issuers resolve to 0 (no fee).

    Returns:
        APR in percent, never negative
    """
    strategy = EstimationStrategy.parse(strategy)

    if issuer == HYUNDAI_CARD:
        rate = 0.0
        for first, last, apr in HYUNDAI_CARD_BRACKETS:
            if first <= months <= last:
                rate = apr
                break
    elif is_supported_issuer(issuer):
        info = CARD_INSTALLMENT_RATES[issuer]
        if strategy is EstimationStrategy.MIN:
            rate = info.min_apr
        elif strategy is EstimationStrategy.AVERAGE:
            rate = (info.min_apr + info.max_apr) / 2
        else:
            rate = info.max_apr
    else:
        rate = 0.0

    return max(rate, 0.0)
