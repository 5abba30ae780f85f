"""
Tests for beautrip_planner/ranking/hospitals.py.

What we test
------------
summarize_hospitals():
  - Average = sum of positive ratings / treatment count, rounded to 1 decimal.
  - Unrated treatments pull the average down; all-unrated hospitals average 0.
  - Records without a hospital name are skipped.
  - Procedures are unique, first-seen, capped at MAX_PROCEDURES_LISTED.
  - Hospitals are sorted best-rated first.
"""

from __future__ import annotations

import pytest

from beautrip_planner.ranking.hospitals import MAX_PROCEDURES_LISTED, summarize_hospitals


class TestSummarizeHospitals:
    def test_sorted_by_average(self, sample_records):
        summaries = summarize_hospitals(sample_records)
        assert [s.hospital_name for s in summaries] == ["압구정의원", "강남클리닉"]

    def test_unrated_treatments_lower_average(self, sample_records):
        gangnam = {s.hospital_name: s for s in summarize_hospitals(sample_records)}["강남클리닉"]
        # 8 treatments, one unrated; positive ratings sum to 32.0
        assert gangnam.average_rating == pytest.approx(4.0)
        assert len(gangnam.treatments) == 8

    def test_totals_and_categories(self, sample_records):
        gangnam = {s.hospital_name: s for s in summarize_hospitals(sample_records)}["강남클리닉"]
        assert gangnam.total_reviews == 120 + 60 + 30 + 200 + 50 + 5 + 3 + 0
        assert gangnam.categories == sorted({"피부", "쁘띠", "성형"})

    def test_all_unrated_is_zero(self, make_record):
        summaries = summarize_hospitals([make_record(rating=0.0), make_record(rating=0.0)])
        assert summaries[0].average_rating == 0.0

    def test_rounded_to_one_decimal(self, make_record):
        records = [make_record(rating=4.44), make_record(rating=4.0), make_record(rating=4.0)]
        assert summarize_hospitals(records)[0].average_rating == pytest.approx(4.1)

    def test_records_without_hospital_skipped(self, make_record):
        summaries = summarize_hospitals([make_record(hospital_name=None), make_record()])
        assert len(summaries) == 1
        assert len(summaries[0].treatments) == 1

    def test_procedures_unique_and_capped(self, make_record):
        records = [make_record(name=f"p{i % 12}") for i in range(30)]
        summary = summarize_hospitals(records)[0]
        assert summary.procedures == [f"p{i}" for i in range(MAX_PROCEDURES_LISTED)]

    def test_empty(self):
        assert summarize_hospitals([]) == []
