"""Installment amortization for card purchases paid in monthly installments"""

from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Tuple

from ledger_gateway.domain.exceptions import InvalidPeriodIndexError
from ledger_gateway.domain.models import AmortizationSchedule, SchedulePeriod
from ledger_gateway.domain.rates import EstimationStrategy, resolve_annual_rate
from ledger_gateway.utils.date_utils import (
    DateInput,
    days_between,
    days_in_year,
    nth_payment_date,
    to_date,
)


def _round_half_up(value: float) -> int:
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def apportion_principal(principal: int, months: int) -> List[int]:
    """
    Split principal into per-period slices that sum exactly to principal.

    Periods 1..N-1 get floor(P / N); the last period absorbs the remainder.

    Example:
        100001 over 3 → [33333, 33333, 33335]
    """
    if principal <= 0 or months < 1:
        return []

    base = principal // months
    return [base] * (months - 1) + [principal - base * (months - 1)]


def period_bounds(purchase_date: date, n: int) -> Tuple[date, date]:
    """Start and end of period n; period 1 starts on the purchase date"""
    start = purchase_date if n == 1 else nth_payment_date(purchase_date, n - 1)
    return start, nth_payment_date(purchase_date, n)


def _period_fee(outstanding: int, annual_rate: float, start: date, end: date) -> int:
    """Day-count prorated fee on the balance carried into a period, actual/actual"""
    days = days_between(start, end)
    if annual_rate <= 0 or outstanding <= 0 or days <= 0:
        return 0
    fee = outstanding * (annual_rate / 100) * (days / days_in_year(end))
    return _round_half_up(fee)


def schedule_for_rate(
    principal: int,
    months: int,
    purchase_date: DateInput,
    annual_rate: float,
) -> AmortizationSchedule:
    """
    Build the declining-balance schedule for an already resolved APR.

    Each period's fee accrues on the balance outstanding before that
    period's principal is retired, and is rounded on its own; the total
    fee is the sum of the rounded period fees.

    Degenerate input (principal <= 0 or fewer than 2 months) yields an
    empty schedule rather than an error.
    """
    purchase_date = to_date(purchase_date)
    annual_rate = max(annual_rate, 0.0)

    if principal <= 0 or months < 2:
        return AmortizationSchedule(
            principal=principal,
            months=months,
            purchase_date=purchase_date,
            annual_rate=annual_rate,
        )

    periods = []
    outstanding = principal
    for n, portion in enumerate(apportion_principal(principal, months), start=1):
        start, end = period_bounds(purchase_date, n)
        periods.append(
            SchedulePeriod(
                index=n,
                period_start=start,
                payment_date=end,
                days=days_between(start, end),
                principal=portion,
                fee=_period_fee(outstanding, annual_rate, start, end),
            )
        )
        outstanding -= portion

    return AmortizationSchedule(
        principal=principal,
        months=months,
        purchase_date=purchase_date,
        annual_rate=annual_rate,
        periods=periods,
    )


def build_schedule(
    principal: int,
    months: int,
    purchase_date: DateInput,
    issuer: Optional[str] = None,
    strategy: "str | EstimationStrategy" = EstimationStrategy.MAX,
) -> AmortizationSchedule:
    """Resolve the issuer's APR and build the full schedule"""
    rate = resolve_annual_rate(issuer, months, strategy)
    return schedule_for_rate(principal, months, purchase_date, rate)


def estimate_total_fee(
    principal: int,
    months: int,
    purchase_date: DateInput,
    issuer: Optional[str] = None,
    strategy: "str | EstimationStrategy" = EstimationStrategy.MAX,
) -> int:
    """Estimated total installment fee stored on the parent entry"""
    return build_schedule(principal, months, purchase_date, issuer, strategy).total_fee


def installment_fee_only(
    principal: int,
    months: int,
    n: int,
    purchase_date: DateInput,
    issuer: Optional[str] = None,
    strategy: "str | EstimationStrategy" = EstimationStrategy.MAX,
) -> int:
    """
    Fee component of period n alone, without building the whole schedule.

    Replays the principal slices of periods 1..n-1 to find the balance
    carried into period n, then applies the same day-count formula as
    the full schedule, so the result always equals schedule.periods[n-1].fee.

    Raises:
        InvalidPeriodIndexError: If n is outside [1, months]
    """
    if principal <= 0 or months < 2:
        return 0
    if not 1 <= n <= months:
        raise InvalidPeriodIndexError(f"Installment period {n} is outside 1..{months}")

    purchase_date = to_date(purchase_date)
    rate = resolve_annual_rate(issuer, months, strategy)
    outstanding = principal - sum(apportion_principal(principal, months)[: n - 1])
    start, end = period_bounds(purchase_date, n)
    return _period_fee(outstanding, rate, start, end)
