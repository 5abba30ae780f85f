"""
Travel-length-aware treatment recommendations.

For a trip of ``n`` days, a treatment fits when its recovery period leaves at
least the procedure day free: ``recovery_days <= n - 1``.  Treatments with no
recorded recovery period always fit.

Treatments are grouped by mid category.  A group with recovery data and at
least one fitting treatment shows only the fitting ones; otherwise the group
falls back to its top ``max_per_group`` treatments by item score, so a
category is never empty just because its recovery data is missing.

Averages are rounded half-up (recovery to one decimal, procedure time to whole
minutes) before groups are ordered: shortest average recovery first, then the
group whose best treatment scores highest.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Optional, Sequence

from beautrip_planner.models.schedule import TravelPeriod
from beautrip_planner.models.treatment import TreatmentRecord
from beautrip_planner.ranking.filters import filter_by_travel_category
from beautrip_planner.ranking.ranker import FALLBACK_GROUP_KEY, group_records
from beautrip_planner.ranking.scorer import (
    DEFAULT_WEIGHTS,
    RankingWeights,
    compute_global_average_rating,
    item_score,
)
from beautrip_planner.utils.time_utils import to_day

logger = logging.getLogger(__name__)


@dataclass
class TravelRecommendation:
    """Treatments of one mid category that suit the trip length."""

    category_mid:              str
    treatments:                list[TreatmentRecord] = field(default_factory=list)
    average_recovery_days:     float = 0.0
    average_procedure_minutes: float = 0.0
    top_score:                 float = 0.0


def travel_day_count(travel_period: TravelPeriod) -> int:
    """Days in the trip, both ends included (3 nights -> 4 days)."""
    return (to_day(travel_period.end) - to_day(travel_period.start)).days + 1


def fits_travel(recovery_days: int, travel_days: int) -> bool:
    """True when a recovery period fits inside a trip of ``travel_days`` days."""
    if recovery_days <= 0:
        return True
    return recovery_days <= travel_days - 1


def _positive_mean(values: Sequence[int]) -> float:
    positive = [v for v in values if v > 0]
    return sum(positive) / len(positive) if positive else 0.0


def _round_half_up(value: float, digits: int = 0) -> float:
    scale = 10 ** digits
    return math.floor(value * scale + 0.5) / scale


def recommend_for_travel(
    records:       Sequence[TreatmentRecord],
    travel_period: TravelPeriod,
    weights:       RankingWeights = DEFAULT_WEIGHTS,
    max_per_group: int = 10,
    category_large: Optional[str] = None,
) -> list[TravelRecommendation]:
    """Build per-category recommendations for a trip.

    Args:
        records:        Catalogue records.
        travel_period:  The user's trip.
        weights:        Ranking constants used for ordering.
        max_per_group:  Cap for the fallback list of a group.
        category_large: Optional trip-planner category, resolved through
                        ``filter_by_travel_category`` (``"전체"``, ``"기타"``,
                        mapped names such as ``"보톡스/필러"``, or a keyword).

    Returns:
        Recommendations ordered by rounded average recovery days, then by the
        score of each group's best treatment (highest first).
    """
    travel_days = travel_day_count(travel_period)

    candidates = filter_by_travel_category(records, category_large)
    logger.debug(
        "Travel recommendations: %d days, category %r, %d candidate treatments",
        travel_days, category_large, len(candidates),
    )

    global_avg = compute_global_average_rating(candidates)

    def _score(r: TreatmentRecord) -> float:
        return item_score(r, global_avg, weights)

    results: list[TravelRecommendation] = []
    for key, group in group_records(candidates, level="mid").items():
        has_recovery_data = any(r.recovery_days > 0 for r in group)
        suitable = [r for r in group if fits_travel(r.recovery_days, travel_days)]

        if has_recovery_data and suitable:
            chosen = suitable
        else:
            chosen = sorted(group, key=lambda r: -_score(r))[:max_per_group]

        ranked = sorted(chosen, key=lambda r: -_score(r))
        results.append(
            TravelRecommendation(
                category_mid=key or FALLBACK_GROUP_KEY,
                treatments=ranked,
                average_recovery_days=_round_half_up(
                    _positive_mean([r.recovery_days for r in chosen]), 1
                ),
                average_procedure_minutes=_round_half_up(
                    _positive_mean([r.procedure_minutes for r in chosen])
                ),
                top_score=_score(ranked[0]) if ranked else 0.0,
            )
        )

    return sorted(results, key=lambda rec: (rec.average_recovery_days, -rec.top_score))
