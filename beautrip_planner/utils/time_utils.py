"""
Calendar-day helpers for the travel planner.

Every schedule comparison happens at day granularity: two values on the same
calendar day compare equal whatever their time-of-day.  ``to_day`` is the one
place that strips the time component.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta
from typing import Union

DayLike = Union[date, datetime, str]


def to_day(value: DayLike) -> date:
    """Normalize a date, datetime or ISO string to a plain ``date``.

    Datetimes keep their own (local) calendar day; no timezone conversion is
    applied.

    Raises:
        ValueError: If a string is not an ISO 8601 date or datetime.
        TypeError: For any other type.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            return datetime.fromisoformat(text).date()
    raise TypeError(f"Cannot interpret {type(value).__name__} as a calendar day.")


def add_days(day: DayLike, days: int) -> date:
    """Return ``day`` shifted by ``days`` calendar days."""
    return to_day(day) + timedelta(days=days)


def date_range(start: DayLike, end: DayLike, step_days: int = 1) -> list[date]:
    """Generate dates from ``start`` to ``end`` inclusive.

    Returns an empty list when ``end`` precedes ``start``.

    Raises:
        ValueError: If ``step_days < 1``.
    """
    if step_days < 1:
        raise ValueError(f"step_days must be >= 1, got {step_days}.")

    first, last = to_day(start), to_day(end)
    result: list[date] = []
    current = first
    while current <= last:
        result.append(current)
        current += timedelta(days=step_days)
    return result


def month_days(year: int, month: int) -> list[date]:
    """All calendar days of ``year``-``month``."""
    _, last = calendar.monthrange(year, month)
    return [date(year, month, d) for d in range(1, last + 1)]
