"""
Category ranker: groups treatment records, orders items inside each group and
orders the groups themselves.

Usage flow
----------
1. group_records(records, level="mid")
   -> dict[group_key, list[TreatmentRecord]]

2. compute_global_average_rating(records)          (ranking.scorer)
   -> float  prior mean C

3. rank_groups(records_by_group, C)
   -> list[RankingGroup]  (evidence-filtered, sorted by group score desc)

``rank_categories()`` chains the three for the common case.

Within a group
--------------
Items are stable-sorted by ``item_score`` descending, adjacent same-name runs
are collapsed, then at most ``dedupe_limit_per_name`` items per name survive.

Minimum-evidence filter
-----------------------
Groups with zero total reviews or a single surviving item are dropped before
group scoring; they carry too little signal to rank.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Mapping, Optional, Sequence

from beautrip_planner.models.treatment import TreatmentRecord
from beautrip_planner.ranking.dedupe import dedupe_consecutive_by_name, limit_by_key
from beautrip_planner.ranking.scorer import (
    DEDUPE_LIMIT_PER_NAME,
    DEFAULT_WEIGHTS,
    GroupScoreComponents,
    RankingWeights,
    compute_global_average_rating,
    compute_group_components,
    item_score,
    observed_range,
    popularity,
)

logger = logging.getLogger(__name__)

FALLBACK_GROUP_KEY = "기타"

_LEVEL_FIELDS: dict[str, str] = {
    "large": "category_large",
    "mid":   "category_mid",
    "small": "category_small",
}

__all__ = [
    "DEDUPE_LIMIT_PER_NAME",
    "FALLBACK_GROUP_KEY",
    "RankingGroup",
    "group_records",
    "rank_categories",
    "rank_group",
    "rank_groups",
]


@dataclass
class RankingGroup:
    """One ranked category and its deduplicated items.

    Attributes:
        group_key:      Category value the group was formed on.
        items:          Score-ordered records, capped per name.
        average_rating: Mean ``rating`` over ``items`` (0 when empty).
        total_reviews:  Sum of ``review_count`` over ``items``.
        score:          Group score; set by ``rank_groups``.
        components:     Group score breakdown; set by ``rank_groups``.
    """

    group_key:      str
    items:          list[TreatmentRecord] = field(default_factory=list)
    average_rating: float = 0.0
    total_reviews:  int = 0
    score:          float = 0.0
    components:     Optional[GroupScoreComponents] = None

    @property
    def item_count(self) -> int:
        return len(self.items)

    @property
    def has_minimum_evidence(self) -> bool:
        return self.total_reviews > 0 and len(self.items) > 1


def group_records(
    records: Sequence[TreatmentRecord],
    level:   str = "mid",
) -> dict[str, list[TreatmentRecord]]:
    """Group records by a category level, preserving first-seen group order.

    Records without a value at ``level`` fall under ``FALLBACK_GROUP_KEY``.

    Raises:
        ValueError: If ``level`` is not one of ``large``, ``mid``, ``small``.
    """
    attr = _LEVEL_FIELDS.get(level)
    if attr is None:
        raise ValueError(
            f"Unknown category level '{level}'. Must be one of {sorted(_LEVEL_FIELDS)}."
        )

    groups: dict[str, list[TreatmentRecord]] = {}
    for record in records:
        key = getattr(record, attr, None) or FALLBACK_GROUP_KEY
        groups.setdefault(key, []).append(record)
    return groups


def rank_group(
    records:           Sequence[TreatmentRecord],
    group_key:         str,
    global_avg_rating: float,
    weights:           RankingWeights = DEFAULT_WEIGHTS,
) -> RankingGroup:
    """Order, deduplicate and aggregate the records of one group."""
    scored = sorted(
        records,
        key=lambda r: -item_score(r, global_avg_rating, weights),
    )
    deduped = dedupe_consecutive_by_name(scored)
    items = limit_by_key(deduped, lambda r: r.name, weights.dedupe_limit_per_name)

    if items:
        average_rating = sum((r.rating or 0.0) for r in items) / len(items)
    else:
        average_rating = 0.0
    total_reviews = sum(max(0, r.review_count or 0) for r in items)

    return RankingGroup(
        group_key=group_key,
        items=items,
        average_rating=average_rating,
        total_reviews=total_reviews,
    )


def rank_groups(
    records_by_group:  Mapping[str, Sequence[TreatmentRecord]],
    global_avg_rating: float,
    weights:           RankingWeights = DEFAULT_WEIGHTS,
) -> list[RankingGroup]:
    """Rank every group, drop thin-evidence groups and sort by group score.

    Args:
        records_by_group:  Group key -> records (e.g. from ``group_records``).
        global_avg_rating: Prior mean ``C`` used for Bayesian shrinkage.
        weights:           Ranking constants.

    Returns:
        RankingGroup list sorted by ``score`` descending; ties keep input order.
    """
    ranked = [
        rank_group(records, key, global_avg_rating, weights)
        for key, records in records_by_group.items()
    ]

    surviving: list[RankingGroup] = []
    for group in ranked:
        if group.has_minimum_evidence:
            surviving.append(group)
        else:
            logger.debug(
                "Dropping group %r: %d items, %d reviews",
                group.group_key, group.item_count, group.total_reviews,
            )

    review_range = observed_range(popularity(g.total_reviews) for g in surviving)
    count_range = observed_range(popularity(g.item_count) for g in surviving)

    scored: list[RankingGroup] = []
    for group in surviving:
        components = compute_group_components(
            average_rating=group.average_rating,
            total_reviews=group.total_reviews,
            item_count=group.item_count,
            global_average_rating=global_avg_rating,
            review_range=review_range,
            count_range=count_range,
            weights=weights,
        )
        scored.append(replace(group, score=components.total, components=components))

    return sorted(scored, key=lambda g: -g.score)


def rank_categories(
    records: Sequence[TreatmentRecord],
    level:   str = "mid",
    weights: RankingWeights = DEFAULT_WEIGHTS,
) -> list[RankingGroup]:
    """Group ``records`` by category level and return the ranked groups."""
    global_avg = compute_global_average_rating(records)
    return rank_groups(group_records(records, level), global_avg, weights)
