# income_engine/utils/date_utils.py
"""
Date utility functions for the Portfolio Income Engine.

Income is bucketed by calendar month ("YYYY-MM") and calendar year
("YYYY"). These helpers keep the key format and month arithmetic in one
place.

Usage:
    from income_engine.utils.date_utils import month_key, last_n_month_starts

    key = month_key(date(2023, 5, 14))  # "2023-05"
"""

import calendar
from datetime import date


def month_key(d: date) -> str:
    """Return the "YYYY-MM" bucket key for a date."""
    return f"{d.year:04d}-{d.month:02d}"


def year_key(d: date) -> str:
    """Return the "YYYY" bucket key for a date."""
    return f"{d.year:04d}"


def month_start(d: date) -> date:
    """First day of the month containing d."""
    return d.replace(day=1)


def month_end(d: date) -> date:
    """Last day of the month containing d."""
    last_day = calendar.monthrange(d.year, d.month)[1]
    return d.replace(day=last_day)


def shift_months(d: date, months: int) -> date:
    """
    Move to the first day of the month `months` away from d.

    Args:
        d: Reference date (only year and month are used)
        months: Offset in months, negative to go back

    Returns:
        First day of the target month

    Example:
        >>> shift_months(date(2024, 1, 31), -1)
        date(2023, 12, 1)
    """
    index = d.year * 12 + (d.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def last_n_month_starts(as_of: date, n: int) -> list[date]:
    """
    First days of the n months ending at as_of's month (inclusive).

    Returned oldest first, so the last element is as_of's month.
    """
    return [shift_months(as_of, -offset) for offset in range(n - 1, -1, -1)]


def iter_month_starts(start: date, end: date) -> list[date]:
    """
    First days of every month from start's month to end's month (inclusive).

    Returns an empty list when start is after end.
    """
    months: list[date] = []
    current = month_start(start)
    last = month_start(end)

    while current <= last:
        months.append(current)
        current = shift_months(current, 1)

    return months
