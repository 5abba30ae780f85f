"""
Shared pytest fixtures for the Beautrip planner test suite.

Provides:
  - ``in_memory_db``: A fresh in-memory SQLite connection with the schema
    applied. Created anew for each test that requests it.
  - ``make_record`` / ``make_entry``: factories for catalogue records and
    schedule entries with sensible defaults.
  - ``sample_records``: a small catalogue spanning three mid categories.
  - ``june_trip``: a 2024-06-10 .. 2024-06-15 travel period.
"""

from __future__ import annotations

import sqlite3
from datetime import date
from typing import Any, Callable, Generator

import pytest

from beautrip_planner.db.schema import apply_schema
from beautrip_planner.models.schedule import ScheduleEntry, TravelPeriod
from beautrip_planner.models.treatment import TreatmentRecord


# ── Database fixture ──────────────────────────────────────────────────────────

@pytest.fixture
def in_memory_db() -> Generator[sqlite3.Connection, None, None]:
    """Yield a fresh in-memory SQLite connection with the schema applied."""
    conn = sqlite3.connect(":memory:")
    conn.row_factory = sqlite3.Row
    apply_schema(conn)
    yield conn
    conn.close()


# ── Sample domain object factories ────────────────────────────────────────────

@pytest.fixture
def make_record() -> Callable[..., TreatmentRecord]:
    """Factory for ``TreatmentRecord`` with overridable fields."""
    counter = {"n": 0}

    def _make(**overrides: Any) -> TreatmentRecord:
        counter["n"] += 1
        fields: dict[str, Any] = {
            "id": counter["n"],
            "name": f"treatment-{counter['n']}",
            "hospital_name": "강남클리닉",
            "category_large": "피부",
            "category_mid": "리프팅",
            "rating": 4.5,
            "review_count": 10,
        }
        fields.update(overrides)
        return TreatmentRecord(**fields)

    return _make


@pytest.fixture
def make_entry() -> Callable[..., ScheduleEntry]:
    """Factory for ``ScheduleEntry`` with overridable fields."""

    def _make(procedure_date: Any = date(2024, 6, 12), recovery_days: int = 3, **kw: Any) -> ScheduleEntry:
        return ScheduleEntry(procedure_date=procedure_date, recovery_days=recovery_days, **kw)

    return _make


@pytest.fixture
def sample_records(make_record) -> list[TreatmentRecord]:
    """Nine records across three mid categories; one category is too thin to rank."""
    return [
        make_record(name="울쎄라", category_mid="리프팅", rating=4.8, review_count=120),
        make_record(name="울쎄라", category_mid="리프팅", rating=4.6, review_count=80, hospital_name="압구정의원"),
        make_record(name="슈링크", category_mid="리프팅", rating=4.4, review_count=60),
        make_record(name="인모드", category_mid="리프팅", rating=4.7, review_count=30),
        make_record(name="보톡스", category_mid="주사", rating=4.2, review_count=200, category_large="쁘띠"),
        make_record(name="필러", category_mid="주사", rating=4.0, review_count=50, category_large="쁘띠"),
        make_record(name="리쥬란", category_mid="주사", rating=4.9, review_count=5, category_large="쁘띠"),
        make_record(name="코 성형", category_mid="코", rating=5.0, review_count=3, category_large="성형", recovery_days=7),
        make_record(name="미백 관리", category_mid=None, rating=0.0, review_count=0),
    ]


@pytest.fixture
def june_trip() -> TravelPeriod:
    return TravelPeriod(start=date(2024, 6, 10), end=date(2024, 6, 15))
