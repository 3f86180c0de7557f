"""Date manipulation utilities for installment schedules"""

import calendar
from datetime import date, datetime
from typing import Union

from dateutil.relativedelta import relativedelta

DateInput = Union[date, datetime, str]

# Card installments settle on this day of the month
PAYMENT_DAY_OF_MONTH = 10


def to_date(value: DateInput) -> date:
    """Normalize a date, datetime or ISO-8601 string to a plain date"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.fromisoformat(value).date()


def nth_payment_date(purchase_date: DateInput, n: int) -> date:
    """
    Payment date of the n-th installment (1-based).

    The month shift happens first, then the day is forced to the 10th,
    so a purchase on the 31st never yields an invalid date.

    Example:
        2024-01-15, n=1 → 2024-02-10
        2024-01-31, n=1 → 2024-02-10
    """
    shifted = to_date(purchase_date) + relativedelta(months=n)
    return shifted.replace(day=PAYMENT_DAY_OF_MONTH)


def one_time_card_shift_date(purchase_date: DateInput) -> date:
    """
    Ledger date for a single (non-installment) card charge billed next month.

    Keeps the day of month; clamps to the last day of shorter months
    (2024-01-31 → 2024-02-29).
    """
    return to_date(purchase_date) + relativedelta(months=1)


def days_between(start: date, end: date) -> int:
    """Calendar days from start to end (negative if end precedes start)"""
    return (end - start).days


def days_in_year(value: date) -> int:
    """Length of the calendar year containing value (365 or 366)"""
    return 366 if calendar.isleap(value.year) else 365
