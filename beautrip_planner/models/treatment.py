"""
Treatment catalogue model.

``TreatmentRecord`` is the validated boundary between the raw catalogue feed
and the ranking engine.  The feed carries loosely typed fields: free-text
categories with stray encoding artifacts, ``NaN`` ratings, recovery periods
written as ``"1-2일"``.  Validators here clean all of that so the ranking code
only ever sees trimmed strings, non-negative counts and float ratings.
"""

from __future__ import annotations

import math
import re
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Values the feed uses for "no value" inside text columns.
_NULL_TOKENS = frozenset({"nan", "null", "none", "undefined", "-"})

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f\u200b-\u200f\ufeff\ufffd]")
_WHITESPACE = re.compile(r"\s+")
_FIRST_INT = re.compile(r"(\d+)")


def normalize_category_text(value: Any) -> Optional[str]:
    """Trim a free-text category, dropping encoding artifacts.

    Returns ``None`` for missing values, null tokens (``"nan"``, ``"null"``)
    and strings that are empty once control / replacement characters are
    removed.
    """
    if value is None:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    text = _CONTROL_CHARS.sub("", str(value))
    text = _WHITESPACE.sub(" ", text).strip()
    if not text or text.lower() in _NULL_TOKENS:
        return None
    return text


def parse_leading_int(value: Any) -> int:
    """Return the first integer found in ``value``; ``0`` when there is none.

    Numbers pass through (truncated, negatives and NaN become 0); strings such
    as ``"3일"``, ``"1-2일"`` or ``"30분"`` yield their first integer.
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        if isinstance(value, float) and math.isnan(value):
            return 0
        return max(0, int(value))
    match = _FIRST_INT.search(str(value))
    return int(match.group(1)) if match else 0


class TreatmentRecord(BaseModel):
    """A single treatment offer from the catalogue.

    Attributes:
        id: Opaque unique identifier (``treatment_id`` in the feed).
        name: Display name, also the deduplication key.
        hospital_name: Clinic offering the treatment.
        category_large: Top-level category, e.g. ``"피부"``.
        category_mid: Mid-level category; the default ranking group.
        category_small: Fine-grained category.
        rating: Average user rating; ``0.0`` when absent.
        review_count: Number of reviews behind ``rating``; never negative.
        selling_price: Current price, when listed.
        discount_rate: Discount percentage, when listed.
        hashtags: Raw hashtag string used for keyword filtering.
        recovery_days: Days of downtime after the procedure; ``0`` if unknown.
        procedure_minutes: Typical procedure length; ``0`` if unknown.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: Union[int, str]
    name: str
    hospital_name: Optional[str] = None
    category_large: Optional[str] = None
    category_mid: Optional[str] = None
    category_small: Optional[str] = None
    rating: float = 0.0
    review_count: int = 0
    selling_price: Optional[float] = None
    discount_rate: Optional[float] = None
    hashtags: Optional[str] = None
    recovery_days: int = Field(default=0, ge=0)
    procedure_minutes: int = Field(default=0, ge=0)

    @field_validator("name", mode="before")
    @classmethod
    def validate_name(cls, v: Any) -> str:
        text = normalize_category_text(v)
        if text is None:
            raise ValueError("Treatment name must be a non-empty string.")
        return text

    @field_validator(
        "hospital_name", "category_large", "category_mid", "category_small", "hashtags",
        mode="before",
    )
    @classmethod
    def clean_text(cls, v: Any) -> Optional[str]:
        return normalize_category_text(v)

    @field_validator("rating", mode="before")
    @classmethod
    def validate_rating(cls, v: Any) -> float:
        if v is None or v == "":
            return 0.0
        rating = float(v)
        if math.isnan(rating) or rating < 0:
            return 0.0
        return rating

    @field_validator("review_count", mode="before")
    @classmethod
    def validate_review_count(cls, v: Any) -> int:
        return parse_leading_int(v)

    @field_validator("selling_price", "discount_rate", mode="before")
    @classmethod
    def validate_optional_number(cls, v: Any) -> Optional[float]:
        if v is None or v == "":
            return None
        number = float(v)
        return None if math.isnan(number) else number

    @field_validator("recovery_days", "procedure_minutes", mode="before")
    @classmethod
    def validate_durations(cls, v: Any) -> int:
        return parse_leading_int(v)
