"""Unit tests for schedule date generation"""

import pytest
from datetime import date, datetime
from ledger_gateway.utils.date_utils import (
    days_between,
    days_in_year,
    nth_payment_date,
    one_time_card_shift_date,
    to_date,
)


def test_nth_payment_date_is_tenth_of_following_months():
    """Test payments land on the 10th, one month per installment"""
    purchase = date(2024, 1, 15)

    assert nth_payment_date(purchase, 1) == date(2024, 2, 10)
    assert nth_payment_date(purchase, 2) == date(2024, 3, 10)
    assert nth_payment_date(purchase, 12) == date(2025, 1, 10)


@pytest.mark.parametrize(
    "purchase",
    [date(2024, 1, 31), date(2023, 1, 31), date(2024, 3, 31), date(2024, 8, 31), date(2023, 12, 31), date(2024, 2, 29)],
)
@pytest.mark.parametrize("n", range(1, 13))
def test_nth_payment_date_month_end_purchases(purchase: date, n: int):
    """Test month-end purchases never produce invalid dates"""
    result = nth_payment_date(purchase, n)

    assert result.day == 10
    assert (result.year - purchase.year) * 12 + result.month - purchase.month == n


def test_nth_payment_date_accepts_strings_and_datetimes():
    assert nth_payment_date("2024-01-31", 1) == date(2024, 2, 10)
    assert nth_payment_date(datetime(2024, 1, 31, 18, 45), 1) == date(2024, 2, 10)


def test_one_time_card_shift_keeps_day_of_month():
    """Test single card charge moves to the same day next month"""
    assert one_time_card_shift_date(date(2024, 3, 15)) == date(2024, 4, 15)
    assert one_time_card_shift_date(date(2024, 12, 5)) == date(2025, 1, 5)


def test_one_time_card_shift_clamps_short_months():
    """Test day clamps to the last day of a shorter month"""
    assert one_time_card_shift_date(date(2024, 1, 31)) == date(2024, 2, 29)
    assert one_time_card_shift_date(date(2023, 1, 31)) == date(2023, 2, 28)
    assert one_time_card_shift_date(date(2024, 5, 31)) == date(2024, 6, 30)


def test_days_in_year():
    assert days_in_year(date(2024, 6, 1)) == 366
    assert days_in_year(date(2023, 6, 1)) == 365
    assert days_in_year(date(1900, 6, 1)) == 365
    assert days_in_year(date(2000, 6, 1)) == 366


def test_days_between():
    assert days_between(date(2024, 1, 15), date(2024, 2, 10)) == 26
    assert days_between(date(2024, 2, 10), date(2024, 1, 15)) == -26


def test_to_date():
    assert to_date("2024-01-15") == date(2024, 1, 15)
    assert to_date(datetime(2024, 1, 15, 23, 59)) == date(2024, 1, 15)
    assert to_date(date(2024, 1, 15)) == date(2024, 1, 15)
