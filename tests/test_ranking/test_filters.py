"""
Tests for beautrip_planner/ranking/filters.py.
"""

from __future__ import annotations

from beautrip_planner.ranking.filters import filter_by_category, filter_by_keywords


class TestFilterByCategory:
    def test_none_or_blank_keeps_all(self, sample_records):
        assert filter_by_category(sample_records, None) == sample_records
        assert filter_by_category(sample_records, "  ") == sample_records

    def test_matches_large_category(self, sample_records):
        kept = filter_by_category(sample_records, "쁘띠")
        assert {r.name for r in kept} == {"보톡스", "필러", "리쥬란"}

    def test_matches_mid_category(self, sample_records):
        kept = filter_by_category(sample_records, "코")
        assert [r.name for r in kept] == ["코 성형"]

    def test_no_match(self, sample_records):
        assert filter_by_category(sample_records, "치아") == []


class TestFilterByKeywords:
    def test_default_kbeauty_keywords(self, sample_records):
        kept = filter_by_keywords(sample_records)
        names = {r.name for r in kept}
        assert {"슈링크", "인모드", "보톡스", "필러", "리쥬란", "미백 관리"} <= names
        assert "코 성형" not in names

    def test_matches_hashtags_case_insensitive(self, make_record):
        tagged = make_record(name="plain", hashtags="#Glow #SKIN", category_large=None)
        untagged = make_record(name="other", category_large=None)
        assert filter_by_keywords([tagged, untagged], ["skin"]) == [tagged]

    def test_empty_keywords_keep_nothing(self, sample_records):
        assert filter_by_keywords(sample_records, []) == []
