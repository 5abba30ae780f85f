"""Record filters applied before ranking."""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from beautrip_planner.models.treatment import TreatmentRecord

# Treatment keywords shown on the K-beauty ranking page.
KBEAUTY_KEYWORDS: tuple[str, ...] = (
    "리쥬란", "인모드", "슈링크", "윤곽", "주사", "보톡스", "필러",
    "리프팅", "탄력", "미백", "백옥", "프락셀", "피코", "레이저",
)


def filter_by_category(
    records:  Sequence[TreatmentRecord],
    category: Optional[str],
) -> list[TreatmentRecord]:
    """Keep records whose large or mid category equals ``category``.

    A missing or blank ``category`` keeps everything.
    """
    if category is None or not category.strip():
        return list(records)
    wanted = category.strip()
    return [r for r in records if wanted in (r.category_large, r.category_mid)]


def filter_by_keywords(
    records:  Sequence[TreatmentRecord],
    keywords: Iterable[str] = KBEAUTY_KEYWORDS,
) -> list[TreatmentRecord]:
    """Keep records whose name, hashtags or large category mention a keyword."""
    needles = [k.lower() for k in keywords if k]
    kept: list[TreatmentRecord] = []
    for record in records:
        haystacks = (
            record.name.lower(),
            (record.hashtags or "").lower(),
            (record.category_large or "").lower(),
        )
        if any(n in h for n in needles for h in haystacks):
            kept.append(record)
    return kept


ALL_CATEGORIES = "전체"
OTHER_CATEGORY = "기타"

# Trip-planner category -> keywords searched in the feed's large/mid categories.
TRAVEL_CATEGORY_KEYWORDS: dict[str, tuple[str, ...]] = {
    "피부관리":    ("피부", "피부관리"),
    "흉터/자국":   ("흉터", "자국", "상처"),
    "윤곽/리프팅": ("리프팅", "윤곽", "볼륨"),
    "코성형":      ("코", "코성형"),
    "눈성형":      ("눈", "눈성형"),
    "보톡스/필러": ("보톡스", "필러", "주사"),
    "체형/지방":   ("체형", "지방", "다이어트", "가슴", "유방"),
}


def _mentions(record: TreatmentRecord, keywords: Iterable[str]) -> bool:
    large = (record.category_large or "").lower()
    mid = (record.category_mid or "").lower()
    return any(k.lower() in large or k.lower() in mid for k in keywords)


def filter_by_travel_category(
    records:  Sequence[TreatmentRecord],
    category: Optional[str],
) -> list[TreatmentRecord]:
    """Select records for a trip-planner category.

    ``None`` or blank keeps everything.  Otherwise records without a large
    category are dropped, and:

      - ``"전체"`` keeps the rest;
      - ``"기타"`` keeps records matching none of the mapped keywords;
      - a mapped category keeps records whose large or mid category contains
        one of its keywords;
      - any other value is used as its own keyword.

    Matching is a case-insensitive substring test.
    """
    if category is None or not category.strip():
        return list(records)
    wanted = category.strip()
    categorized = [r for r in records if r.category_large]

    if wanted == ALL_CATEGORIES:
        return categorized
    if wanted == OTHER_CATEGORY:
        every_keyword = [k for group in TRAVEL_CATEGORY_KEYWORDS.values() for k in group]
        return [r for r in categorized if not _mentions(r, every_keyword)]

    keywords = TRAVEL_CATEGORY_KEYWORDS.get(wanted, (wanted,))
    return [r for r in categorized if _mentions(r, keywords)]
