"""
Tests for beautrip_planner/schedule/model.py.

What we test
------------
is_travel_day():
  - Inclusive on both ends; False without a travel period.
  - Time-of-day on the queried day or the period bounds is ignored.

recovery_day_index() / classify():
  - The procedure day is not a recovery day; recovery runs 1..N after it.
  - recovery_days == 0 contributes only the procedure day.
  - Overlapping windows: index from the first entry, every match listed.
  - is_recovery_outside_travel only when recovering on a non-travel day.
  - No travel period: every travel flag False, nothing raises.
  - Entries built without validation (negative recovery days) do not raise.

is_recovery_period_outside_travel() / entries_outside_travel():
  - Warns when procedure_date + recovery_days > travel end.
  - Never warns without a travel period or without recovery days.

classify_range() / month_calendar():
  - One classification per day, in order; empty for reversed ranges.
"""

from __future__ import annotations

from datetime import date, datetime

import pytest

from beautrip_planner.models.schedule import ScheduleEntry, TravelPeriod
from beautrip_planner.schedule.model import (
    classify,
    classify_range,
    entries_outside_travel,
    is_recovery_period_outside_travel,
    is_travel_day,
    month_calendar,
    recovery_day_index,
    recovery_end_date,
)


# ── is_travel_day ─────────────────────────────────────────────────────────────

class TestIsTravelDay:
    def test_inclusive_bounds(self, june_trip):
        assert is_travel_day(date(2024, 6, 10), june_trip)
        assert is_travel_day(date(2024, 6, 15), june_trip)
        assert not is_travel_day(date(2024, 6, 9), june_trip)
        assert not is_travel_day(date(2024, 6, 16), june_trip)

    def test_no_travel_period(self):
        assert not is_travel_day(date(2024, 6, 10), None)

    @pytest.mark.parametrize("hour", [0, 9, 23])
    def test_time_of_day_ignored(self, hour):
        period = TravelPeriod(
            start=datetime(2024, 6, 10, 23, 59),
            end=datetime(2024, 6, 15, 0, 1),
        )
        assert classify(datetime(2024, 6, 10, hour, 30), [], period).is_travel_day
        assert classify(datetime(2024, 6, 15, hour, 30), [], period).is_travel_day
        assert not classify(datetime(2024, 6, 16, hour, 30), [], period).is_travel_day

    def test_single_day_trip(self):
        period = TravelPeriod(start=date(2024, 6, 10), end=date(2024, 6, 10))
        assert is_travel_day(date(2024, 6, 10), period)


# ── recovery window ───────────────────────────────────────────────────────────

class TestRecoveryWindow:
    def test_procedure_day_excluded(self, make_entry):
        entry = make_entry(procedure_date=date(2024, 6, 10), recovery_days=3)
        indexes = [
            classify(date(2024, 6, d), [entry], None).recovery_day_index
            for d in range(10, 15)
        ]
        assert indexes == [None, 1, 2, 3, None]

    def test_procedure_day_flag(self, make_entry):
        entry = make_entry(procedure_date=date(2024, 6, 10), recovery_days=3)
        c = classify(datetime(2024, 6, 10, 18, 0), [entry], None)
        assert c.is_procedure_day
        assert c.procedure_entries == [entry]
        assert not c.is_recovery_day

    def test_zero_recovery_days(self, make_entry):
        entry = make_entry(procedure_date=date(2024, 6, 10), recovery_days=0)
        assert recovery_day_index(date(2024, 6, 11), entry) is None
        assert classify(date(2024, 6, 10), [entry], None).is_procedure_day

    def test_unvalidated_negative_recovery_does_not_raise(self):
        entry = ScheduleEntry.model_construct(
            entry_id="raw", procedure_date=date(2024, 6, 10), recovery_days=-2
        )
        assert recovery_day_index(date(2024, 6, 9), entry) is None
        c = classify(date(2024, 6, 10), [entry], None)
        assert c.is_procedure_day
        assert c.recovery_day_index is None

    def test_overlap_reports_first_entry_and_all_matches(self, make_entry):
        first = make_entry(procedure_date=date(2024, 6, 10), recovery_days=5)
        second = make_entry(procedure_date=date(2024, 6, 12), recovery_days=5)
        c = classify(date(2024, 6, 13), [first, second], None)
        assert c.recovery_day_index == 3
        assert [(m.entry.entry_id, m.day_index) for m in c.recovery_matches] == [
            (first.entry_id, 3),
            (second.entry_id, 1),
        ]

    def test_overlap_order_follows_caller(self, make_entry):
        first = make_entry(procedure_date=date(2024, 6, 10), recovery_days=5)
        second = make_entry(procedure_date=date(2024, 6, 12), recovery_days=5)
        assert classify(date(2024, 6, 13), [second, first], None).recovery_day_index == 1

    def test_recovery_end_date(self, make_entry):
        entry = make_entry(procedure_date=date(2024, 6, 14), recovery_days=5)
        assert recovery_end_date(entry) == date(2024, 6, 19)


# ── recovery outside travel ───────────────────────────────────────────────────

class TestRecoveryOutsideTravel:
    def test_late_procedure_warns(self, make_entry, june_trip):
        entry = make_entry(procedure_date=date(2024, 6, 14), recovery_days=5)
        assert is_recovery_period_outside_travel(entry, june_trip)
        assert classify(date(2024, 6, 16), [entry], june_trip).is_recovery_outside_travel
        assert not classify(date(2024, 6, 15), [entry], june_trip).is_recovery_outside_travel

    def test_recovery_ending_on_last_day_is_fine(self, make_entry, june_trip):
        entry = make_entry(procedure_date=date(2024, 6, 12), recovery_days=3)
        assert not is_recovery_period_outside_travel(entry, june_trip)

    def test_no_travel_period_never_warns(self, make_entry):
        entry = make_entry(procedure_date=date(2024, 6, 14), recovery_days=5)
        assert not is_recovery_period_outside_travel(entry, None)
        c = classify(date(2024, 6, 16), [entry], None)
        assert c.recovery_day_index == 2
        assert not c.is_travel_day
        assert not c.is_recovery_outside_travel

    def test_zero_recovery_never_warns(self, make_entry, june_trip):
        entry = make_entry(procedure_date=date(2024, 6, 20), recovery_days=0)
        assert not is_recovery_period_outside_travel(entry, june_trip)

    def test_entries_outside_travel(self, make_entry, june_trip):
        ok = make_entry(procedure_date=date(2024, 6, 11), recovery_days=2)
        late = make_entry(procedure_date=date(2024, 6, 15), recovery_days=1)
        assert entries_outside_travel([ok, late], june_trip) == [late]


# ── ranges ────────────────────────────────────────────────────────────────────

class TestRanges:
    def test_classify_range(self, make_entry, june_trip):
        entry = make_entry(procedure_date=date(2024, 6, 14), recovery_days=5)
        days = classify_range(date(2024, 6, 13), date(2024, 6, 20), [entry], june_trip)
        assert [c.day for c in days][0] == date(2024, 6, 13)
        assert len(days) == 8
        assert [c.is_recovery_outside_travel for c in days] == [
            False, False, False, True, True, True, True, False,
        ]

    def test_reversed_range_is_empty(self, june_trip):
        assert classify_range(date(2024, 6, 20), date(2024, 6, 10), [], june_trip) == []

    def test_month_calendar(self, june_trip):
        days = month_calendar(2024, 6, [], june_trip)
        assert len(days) == 30
        assert sum(c.is_travel_day for c in days) == 6

    def test_leap_february(self):
        assert len(month_calendar(2024, 2, [], None)) == 29
