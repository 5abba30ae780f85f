"""
Travel schedule models.

``ScheduleEntry`` is one procedure the user has planned, ``TravelPeriod`` the
inclusive window they are in the country, and ``DateClassification`` the
per-day answer the schedule model computes for calendar rendering.

Validation lives here, at the boundary: an entry with negative recovery days or
a travel period ending before it starts is rejected on construction.  The
schedule functions themselves never assume these invariants, so objects built
with ``model_construct()`` still classify without raising.
"""

from __future__ import annotations

import uuid
from datetime import date
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from beautrip_planner.utils.time_utils import to_day


def _new_entry_id() -> str:
    return uuid.uuid4().hex


class ScheduleEntry(BaseModel):
    """A planned procedure and its recovery length.

    Attributes:
        entry_id: Stable identifier used to delete the entry later.
        procedure_id: Treatment identifier, when the entry came from the catalogue.
        procedure_name: Display name for calendar labels.
        procedure_date: Day of the procedure.
        recovery_days: Days after ``procedure_date`` counted as recovery.
    """

    model_config = ConfigDict(frozen=True)

    entry_id: str = Field(default_factory=_new_entry_id)
    procedure_id: Optional[Union[int, str]] = None
    procedure_name: Optional[str] = None
    procedure_date: date
    recovery_days: int = 0

    @field_validator("procedure_date", mode="before")
    @classmethod
    def normalize_procedure_date(cls, v: Any) -> date:
        return to_day(v)

    @field_validator("recovery_days")
    @classmethod
    def validate_recovery_days(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"recovery_days must be >= 0, got {v}.")
        return v


class TravelPeriod(BaseModel):
    """Inclusive ``[start, end]`` travel window."""

    model_config = ConfigDict(frozen=True)

    start: date
    end: date

    @field_validator("start", "end", mode="before")
    @classmethod
    def normalize_day(cls, v: Any) -> date:
        return to_day(v)

    @model_validator(mode="after")
    def validate_order(self) -> "TravelPeriod":
        if self.start > self.end:
            raise ValueError(
                f"Travel period start ({self.start}) must not be after end ({self.end})."
            )
        return self

    @property
    def day_count(self) -> int:
        """Number of calendar days in the period, both ends included."""
        return (self.end - self.start).days + 1


class RecoveryMatch(BaseModel):
    """One recovery window covering a queried day."""

    model_config = ConfigDict(frozen=True)

    entry: ScheduleEntry
    day_index: int


class DateClassification(BaseModel):
    """Schedule state of a single calendar day.

    Attributes:
        day: The classified day.
        is_travel_day: Day lies inside the travel period.
        is_procedure_day: Some entry's procedure falls on this day.
        recovery_day_index: 1-based recovery offset from the first matching
            entry, or ``None``.
        is_recovery_outside_travel: Recovering on a day outside the trip.
        procedure_entries: Entries whose procedure falls on this day.
        recovery_matches: Every recovery window covering this day, in entry order.
    """

    model_config = ConfigDict(frozen=True)

    day: date
    is_travel_day: bool = False
    is_procedure_day: bool = False
    recovery_day_index: Optional[int] = None
    is_recovery_outside_travel: bool = False
    procedure_entries: list[ScheduleEntry] = Field(default_factory=list)
    recovery_matches: list[RecoveryMatch] = Field(default_factory=list)

    @property
    def is_recovery_day(self) -> bool:
        return self.recovery_day_index is not None
