"""Unit tests for installment amortization"""

import pytest
from datetime import date
from ledger_gateway.domain.exceptions import InvalidPeriodIndexError
from ledger_gateway.domain.installments import (
    apportion_principal,
    build_schedule,
    estimate_total_fee,
    installment_fee_only,
    schedule_for_rate,
)
from ledger_gateway.domain.rates import HYUNDAI_CARD, OTHER_ISSUER
from ledger_gateway.utils.date_utils import nth_payment_date


def test_apportion_principal_equal_split():
    """Test evenly divisible principal"""
    assert apportion_principal(300000, 3) == [100000, 100000, 100000]


def test_apportion_principal_rounding():
    """Test last period absorbs remainder"""
    portions = apportion_principal(100001, 3)

    assert portions == [33333, 33333, 33335]
    assert sum(portions) == 100001


@pytest.mark.parametrize("principal", [1, 999, 100000, 123457, 9999999])
@pytest.mark.parametrize("months", [2, 3, 7, 12, 24])
def test_apportion_principal_sums_exactly(principal: int, months: int):
    """Test principal slices always add back up to the principal"""
    assert sum(apportion_principal(principal, months)) == principal


def test_zero_rate_bracket_is_pure_principal_split():
    """Test 3 months on Hyundai Card: 0% bracket, no fees"""
    schedule = build_schedule(300000, 3, date(2024, 1, 15), HYUNDAI_CARD)

    assert schedule.annual_rate == 0
    assert [p.fee for p in schedule.periods] == [0, 0, 0]
    assert [p.principal for p in schedule.periods] == [100000, 100000, 100000]
    assert [p.payment_date for p in schedule.periods] == [
        date(2024, 2, 10),
        date(2024, 3, 10),
        date(2024, 4, 10),
    ]
    assert schedule.total_fee == 0


def test_first_period_day_count_fee():
    """Test 6 months on Hyundai Card: 15% bracket, 26 days in a leap year"""
    schedule = build_schedule(300000, 6, date(2024, 1, 15), HYUNDAI_CARD)
    first = schedule.periods[0]

    assert schedule.annual_rate == 15
    assert first.payment_date == date(2024, 2, 10)
    assert first.days == 26
    assert first.fee == round(300000 * 0.15 * 26 / 366)
    assert first.amount == 50000 + first.fee


def test_fee_accrues_on_declining_balance():
    """Test period 2 fee uses the balance left after period 1's principal"""
    schedule = build_schedule(300000, 6, date(2024, 1, 15), HYUNDAI_CARD)
    second = schedule.periods[1]

    # 2024-02-10 → 2024-03-10 is 29 days; 250000 still outstanding
    assert second.days == 29
    assert second.fee == round(250000 * 0.15 * 29 / 366)


def test_unknown_issuer_has_no_fee():
    """Test absent or unknown issuer resolves to 0%"""
    for issuer in (None, "Unknown Bank"):
        schedule = build_schedule(100000, 2, date(2024, 5, 3), issuer)

        assert [p.fee for p in schedule.periods] == [0, 0]
        assert [p.principal for p in schedule.periods] == [50000, 50000]


def test_period_crossing_year_end_uses_end_year_length():
    """Test actual/actual day count takes the year length of the period end"""
    schedule = build_schedule(100000, 2, date(2023, 12, 20), OTHER_ISSUER, "max")
    first = schedule.periods[0]

    assert first.payment_date == date(2024, 1, 10)
    assert first.days == 21
    assert first.fee == round(100000 * (19.9 / 100) * (21 / 366))


def test_total_fee_is_sum_of_rounded_period_fees():
    """Test round-then-sum for the estimated total fee"""
    schedule = build_schedule(1234567, 12, date(2023, 3, 28), OTHER_ISSUER, "average")

    assert schedule.total_fee == sum(p.fee for p in schedule.periods)
    assert estimate_total_fee(1234567, 12, date(2023, 3, 28), OTHER_ISSUER, "average") == schedule.total_fee
    assert schedule.total_amount == 1234567 + schedule.total_fee


@pytest.mark.parametrize("purchase_date", [date(2024, 1, 31), date(2023, 11, 30), date(2024, 2, 29), date(2024, 7, 1)])
@pytest.mark.parametrize("months", [2, 4, 6, 10, 12])
def test_schedule_shape(purchase_date: date, months: int):
    """Test N periods, positive lengths, payment on the 10th, exact principal"""
    schedule = build_schedule(777777, months, purchase_date, OTHER_ISSUER)

    assert len(schedule.periods) == months
    assert [p.index for p in schedule.periods] == list(range(1, months + 1))
    assert all(p.days > 0 for p in schedule.periods)
    assert all(p.payment_date.day == 10 for p in schedule.periods)
    assert sum(p.principal for p in schedule.periods) == 777777
    assert schedule.periods[0].period_start == purchase_date
    for prev, cur in zip(schedule.periods, schedule.periods[1:]):
        assert cur.period_start == prev.payment_date


@pytest.mark.parametrize("issuer", [HYUNDAI_CARD, OTHER_ISSUER])
@pytest.mark.parametrize("months", [4, 6, 9, 12])
@pytest.mark.parametrize("purchase_date", [date(2024, 1, 31), date(2023, 12, 15), date(2025, 6, 9)])
def test_fee_only_matches_full_schedule(issuer: str, months: int, purchase_date: date):
    """Test isolated period lookup agrees with the full schedule at every index"""
    schedule = build_schedule(543210, months, purchase_date, issuer, "max")

    for n in range(1, months + 1):
        assert installment_fee_only(543210, months, n, purchase_date, issuer, "max") == schedule.periods[n - 1].fee


def test_fee_only_rejects_out_of_range_period():
    """Test period index outside 1..months"""
    with pytest.raises(InvalidPeriodIndexError):
        installment_fee_only(300000, 6, 0, date(2024, 1, 15), HYUNDAI_CARD)
    with pytest.raises(InvalidPeriodIndexError):
        installment_fee_only(300000, 6, 7, date(2024, 1, 15), HYUNDAI_CARD)


def test_fee_only_degenerate_inputs_return_zero():
    """Test non-positive principal or single month is not an error"""
    assert installment_fee_only(0, 6, 1, date(2024, 1, 15), HYUNDAI_CARD) == 0
    assert installment_fee_only(300000, 1, 1, date(2024, 1, 15), HYUNDAI_CARD) == 0


def test_degenerate_inputs_give_empty_schedule():
    """Test principal <= 0 or months < 2"""
    assert build_schedule(0, 6, date(2024, 1, 15), HYUNDAI_CARD).periods == []
    assert build_schedule(-100, 6, date(2024, 1, 15), HYUNDAI_CARD).periods == []
    assert build_schedule(300000, 1, date(2024, 1, 15), HYUNDAI_CARD).periods == []
    assert build_schedule(300000, 1, date(2024, 1, 15), HYUNDAI_CARD).total_fee == 0


def test_negative_rate_treated_as_zero():
    """Test an explicit negative APR yields no fees"""
    schedule = schedule_for_rate(100000, 3, date(2024, 1, 15), -5.0)

    assert schedule.annual_rate == 0
    assert schedule.total_fee == 0


def test_schedule_is_deterministic():
    """Test identical inputs produce identical schedules"""
    first = build_schedule(300000, 6, "2024-01-15", HYUNDAI_CARD)
    second = build_schedule(300000, 6, date(2024, 1, 15), HYUNDAI_CARD)

    assert first == second


def test_payment_dates_come_from_date_generator():
    """Test schedule dates match nth_payment_date"""
    purchase = date(2024, 8, 31)
    schedule = build_schedule(500000, 5, purchase, HYUNDAI_CARD)

    assert [p.payment_date for p in schedule.periods] == [nth_payment_date(purchase, n) for n in range(1, 6)]
