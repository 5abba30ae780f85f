"""
Tests for beautrip_planner/reporting/formatters.py.
"""

from __future__ import annotations

from datetime import date

from beautrip_planner.ranking.hospitals import summarize_hospitals
from beautrip_planner.ranking.procedures import rank_treatments
from beautrip_planner.ranking.ranker import rank_categories
from beautrip_planner.reporting.formatters import (
    format_calendar,
    format_hospital_table,
    format_ranking_table,
    format_schedule_entries,
    format_travel_recommendations,
    format_treatment_rankings,
)
from beautrip_planner.schedule.model import month_calendar
from beautrip_planner.schedule.recommend import recommend_for_travel


class TestRankingTable:
    def test_lists_groups_and_items(self, sample_records):
        text = format_ranking_table(rank_categories(sample_records), top_items=1)
        assert "  1. " in text
        assert "리프팅" in text and "주사" in text
        assert "울쎄라 @ 강남클리닉" in text
        # top_items=1 hides second-ranked items
        assert "인모드" not in text

    def test_empty(self):
        assert "No category" in format_ranking_table([])


class TestHospitalTable:
    def test_rows(self, sample_records):
        text = format_hospital_table(summarize_hospitals(sample_records))
        lines = text.splitlines()
        assert lines[0].lstrip().startswith("#")
        assert "압구정의원" in lines[1]

    def test_limit(self, sample_records):
        text = format_hospital_table(summarize_hospitals(sample_records), limit=1)
        assert len(text.splitlines()) == 2

    def test_empty(self):
        assert "No hospitals" in format_hospital_table([])


class TestTreatmentRankings:
    def test_rows_with_price(self, make_record):
        rankings = rank_treatments([
            make_record(name="울쎄라", rating=4.8, review_count=120, selling_price=1_250_000),
            make_record(name="울쎄라", rating=4.6, review_count=80, hospital_name="압구정의원"),
            make_record(name="필러", rating=4.0, review_count=5),
        ])
        lines = format_treatment_rankings(rankings).splitlines()
        assert lines[0].lstrip().startswith("#")
        assert "울쎄라" in lines[1] and "1,250,000" in lines[1]
        assert lines[2].strip() == "top: 강남클리닉, 압구정의원"
        assert "필러" in lines[3] and lines[3].rstrip().endswith("-  1")

    def test_limit(self, sample_records):
        text = format_treatment_rankings(rank_treatments(sample_records), limit=1)
        assert len(text.splitlines()) == 3

    def test_empty(self):
        assert "No procedures" in format_treatment_rankings([])


class TestTravelRecommendations:
    def test_lists_categories(self, sample_records, june_trip):
        text = format_travel_recommendations(recommend_for_travel(sample_records, june_trip))
        assert "[리프팅]" in text
        assert "recovery" in text

    def test_empty(self):
        assert "No treatments" in format_travel_recommendations([])


class TestScheduleEntries:
    def test_without_travel_period(self):
        text = format_schedule_entries([], None)
        assert text.splitlines()[0] == "Travel period: not set"
        assert "No procedures planned" in text

    def test_flags_warnings(self, make_entry, june_trip):
        ok = make_entry(procedure_date=date(2024, 6, 11), recovery_days=1, procedure_name="필러")
        late = make_entry(procedure_date=date(2024, 6, 14), recovery_days=5, procedure_name="코 성형")
        text = format_schedule_entries([ok, late], june_trip, warnings=[late])
        lines = text.splitlines()
        assert lines[0] == "Travel period: 2024-06-10 ~ 2024-06-15"
        assert "[WARN]" not in lines[1]
        assert "코 성형" in lines[2] and "[WARN]" in lines[2]


class TestCalendar:
    def test_cells(self, make_entry, june_trip):
        entry = make_entry(procedure_date=date(2024, 6, 14), recovery_days=5)
        text = format_calendar(month_calendar(2024, 6, [entry], june_trip))
        assert text.splitlines()[0].split() == ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
        assert " 10T" in text
        assert " 14P" in text
        assert " 15R" in text
        assert " 16!" in text
        assert " 20." in text

    def test_first_week_offset(self):
        # 2024-06-01 is a Saturday
        text = format_calendar(month_calendar(2024, 6, [], None))
        first_week = text.splitlines()[1]
        assert first_week.startswith(" " * 5)
        assert first_week.split() == ["1.", "2."]

    def test_empty(self):
        assert format_calendar([]) == ""
