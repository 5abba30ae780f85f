"""
Schedule / recovery model: per-day classification of a travel plan.

Given planned procedures (``ScheduleEntry``) and a ``TravelPeriod``, answers
for any calendar day:

  - is it a travel day?            start <= day <= end
  - is it a procedure day?         some entry.procedure_date == day
  - which recovery day is it?      day in (procedure_date, procedure_date + recovery_days]
  - is recovery outside the trip?  recovering AND a trip is set AND not a travel day

The procedure day itself is never a recovery day; recovery begins the day
after.  All comparisons are day-normalized through ``to_day``.

When several recovery windows cover the same day, ``recovery_day_index``
reports the first matching entry in caller order, while
``recovery_matches`` lists every overlap.

Nothing here raises on missing or odd input: no travel period means every
travel flag is ``False``; entries with ``recovery_days <= 0`` contribute only
their procedure day.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Sequence

from beautrip_planner.models.schedule import (
    DateClassification,
    RecoveryMatch,
    ScheduleEntry,
    TravelPeriod,
)
from beautrip_planner.utils.time_utils import DayLike, add_days, date_range, month_days, to_day


def is_travel_day(day: DayLike, travel_period: Optional[TravelPeriod]) -> bool:
    """True iff ``day`` falls inside the inclusive travel window."""
    if travel_period is None:
        return False
    d = to_day(day)
    return to_day(travel_period.start) <= d <= to_day(travel_period.end)


def recovery_end_date(entry: ScheduleEntry) -> date:
    """Last recovery day of ``entry`` (the procedure day when it has none)."""
    return add_days(entry.procedure_date, max(0, entry.recovery_days or 0))


def recovery_day_index(day: DayLike, entry: ScheduleEntry) -> Optional[int]:
    """1-based offset of ``day`` into ``entry``'s recovery window, else ``None``."""
    days = entry.recovery_days or 0
    if days <= 0:
        return None
    offset = (to_day(day) - to_day(entry.procedure_date)).days
    if 1 <= offset <= days:
        return offset
    return None


def recovery_matches(day: DayLike, entries: Iterable[ScheduleEntry]) -> list[RecoveryMatch]:
    """Every entry whose recovery window covers ``day``, in input order."""
    matches: list[RecoveryMatch] = []
    for entry in entries:
        index = recovery_day_index(day, entry)
        if index is not None:
            matches.append(RecoveryMatch(entry=entry, day_index=index))
    return matches


def classify(
    day:           DayLike,
    entries:       Sequence[ScheduleEntry],
    travel_period: Optional[TravelPeriod],
) -> DateClassification:
    """Classify one calendar day against the plan.

    Args:
        day:           Day to classify (time-of-day ignored).
        entries:       Planned procedures, in caller order.
        travel_period: Travel window, or ``None`` when not set.

    Returns:
        DateClassification for ``day``.
    """
    d = to_day(day)
    travel = is_travel_day(d, travel_period)
    procedures = [e for e in entries if to_day(e.procedure_date) == d]
    matches = recovery_matches(d, entries)
    index = matches[0].day_index if matches else None

    return DateClassification(
        day=d,
        is_travel_day=travel,
        is_procedure_day=bool(procedures),
        recovery_day_index=index,
        is_recovery_outside_travel=(
            index is not None and travel_period is not None and not travel
        ),
        procedure_entries=procedures,
        recovery_matches=matches,
    )


def is_recovery_period_outside_travel(
    entry:         ScheduleEntry,
    travel_period: Optional[TravelPeriod],
) -> bool:
    """True when ``entry``'s recovery runs past the end of the trip.

    Compares ``procedure_date + recovery_days`` with ``travel_period.end``.
    Entries without recovery days and plans without a travel period never warn.
    """
    if travel_period is None or (entry.recovery_days or 0) <= 0:
        return False
    return recovery_end_date(entry) > to_day(travel_period.end)


def entries_outside_travel(
    entries:       Iterable[ScheduleEntry],
    travel_period: Optional[TravelPeriod],
) -> list[ScheduleEntry]:
    """Entries whose recovery extends beyond the travel period."""
    return [e for e in entries if is_recovery_period_outside_travel(e, travel_period)]


def classify_range(
    start:         DayLike,
    end:           DayLike,
    entries:       Sequence[ScheduleEntry],
    travel_period: Optional[TravelPeriod],
) -> list[DateClassification]:
    """Classify every day from ``start`` to ``end`` inclusive (empty if reversed)."""
    return [classify(d, entries, travel_period) for d in date_range(start, end)]


def month_calendar(
    year:          int,
    month:         int,
    entries:       Sequence[ScheduleEntry],
    travel_period: Optional[TravelPeriod],
) -> list[DateClassification]:
    """Classify every day of one calendar month."""
    return [classify(d, entries, travel_period) for d in month_days(year, month)]
