"""
Hospital summaries built from the treatment catalogue.

A hospital's average rating is the sum of its positive treatment ratings
divided by its total treatment count (unrated treatments pull the average
down), rounded to one decimal.  Hospitals are listed best-rated first.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from beautrip_planner.models.treatment import TreatmentRecord

MAX_PROCEDURES_LISTED = 10


@dataclass
class HospitalSummary:
    """Aggregated view of one hospital's treatments."""

    hospital_name:  str
    treatments:     list[TreatmentRecord] = field(default_factory=list)
    average_rating: float = 0.0
    total_reviews:  int = 0
    procedures:     list[str] = field(default_factory=list)
    categories:     list[str] = field(default_factory=list)


def summarize_hospitals(records: Sequence[TreatmentRecord]) -> list[HospitalSummary]:
    """Group treatments by hospital and aggregate ratings and reviews.

    Records without a hospital name are skipped.  Ties on average rating keep
    first-seen hospital order.
    """
    by_hospital: dict[str, list[TreatmentRecord]] = {}
    for record in records:
        if not record.hospital_name:
            continue
        by_hospital.setdefault(record.hospital_name, []).append(record)

    summaries: list[HospitalSummary] = []
    for name, treatments in by_hospital.items():
        rating_sum = sum(t.rating for t in treatments if t.rating > 0)
        average = rating_sum / len(treatments) if rating_sum > 0 else 0.0

        procedures = list(dict.fromkeys(t.name for t in treatments))
        categories = sorted({t.category_large for t in treatments if t.category_large})

        summaries.append(
            HospitalSummary(
                hospital_name=name,
                treatments=list(treatments),
                average_rating=round(average, 1),
                total_reviews=sum(t.review_count for t in treatments),
                procedures=procedures[:MAX_PROCEDURES_LISTED],
                categories=categories,
            )
        )

    return sorted(summaries, key=lambda h: -h.average_rating)
