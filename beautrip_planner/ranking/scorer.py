"""
Ranking score primitives: Bayesian rating shrinkage, range normalization and
the item / group composite scores.

Item score
----------
    item = bayes(rating, reviews, C, m) * 0.6 + log10(reviews + 1) * 0.4

Group score (weighted sum)
--------------------------
    total = (
        bayesian_rating  * 0.4   # group average shrunk toward the global mean
        + review_score   * 0.3   # log-scaled review volume, range-normalized
        + count_score    * 0.3   # log-scaled distinct item count, sub-linear
    )

Component explanations
----------------------
bayesian_rating:
    bayes(average_rating, total_reviews, C, 20).  A group backed by a handful
    of reviews is pulled toward the dataset-wide mean C.

review_score (0–1):
    normalize01(log10(T + 1), rMin, rMax) * review_penalty, where
    review_penalty = (T / 5)^2 below 5 reviews, else 1.

count_score (0–1):
    normalize01(log10(n + 1), cMin, cMax)^0.7 * count_penalty, where
    count_penalty = (n / 3)^1.5 below 3 items, else 1.

All functions here are pure: no I/O, no shared state, and every
divide-by-zero or empty-input case degrades to a neutral value instead of
raising.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Protocol

DEFAULT_PRIOR_WEIGHT = 20.0
DEDUPE_LIMIT_PER_NAME = 2


class RatedRecord(Protocol):
    """Anything exposing ``rating`` and ``review_count`` attributes."""

    rating: float
    review_count: int


@dataclass(frozen=True)
class RankingWeights:
    """Every tunable constant of the ranking engine.

    Defaults are the production values; ``RankingConfig.to_weights()`` builds
    an instance from TOML overrides.
    """

    prior_weight:             float = DEFAULT_PRIOR_WEIGHT
    dedupe_limit_per_name:    int   = DEDUPE_LIMIT_PER_NAME
    item_rating_weight:       float = 0.6
    item_popularity_weight:   float = 0.4
    group_rating_weight:      float = 0.4
    group_review_weight:      float = 0.3
    group_count_weight:       float = 0.3
    review_penalty_threshold: int   = 5
    count_penalty_threshold:  int   = 3
    count_penalty_exponent:   float = 1.5
    count_score_exponent:     float = 0.7


DEFAULT_WEIGHTS = RankingWeights()


def bayesian_adjusted_rating(
    item_rating:           float,
    item_review_count:     float,
    global_average_rating: float,
    prior_weight:          float = DEFAULT_PRIOR_WEIGHT,
) -> float:
    """Shrink a rating toward the global mean by how little evidence backs it.

    Returns ``(v/(v+m))*R + (m/(v+m))*C`` with ``v = max(0, reviews)``,
    ``R = max(0, rating)``, ``C = global_average_rating`` and
    ``m = prior_weight``.

    With no reviews the result is exactly ``C``; as reviews grow it converges
    to ``R``.
    """
    v = max(0.0, float(item_review_count))
    r = max(0.0, float(item_rating))
    c = float(global_average_rating)
    m = float(prior_weight)

    denom = v + m
    if denom <= 0:
        return c
    return (v / denom) * r + (m / denom) * c


def compute_global_average_rating(records: Iterable[RatedRecord]) -> float:
    """Mean rating over records with a positive rating; ``0.0`` when none."""
    ratings = [float(r.rating) for r in records if (r.rating or 0) > 0]
    if not ratings:
        return 0.0
    return sum(ratings) / len(ratings)


def normalize01(value: float, lo: float, hi: float) -> float:
    """Map ``value`` onto ``[lo, hi] -> [0, 1]``; ``0.0`` for a degenerate range."""
    if hi <= lo:
        return 0.0
    return (value - lo) / (hi - lo)


def popularity(review_count: float) -> float:
    """Log-scaled review volume, ``log10(reviews + 1)``."""
    return math.log10(max(0.0, float(review_count)) + 1.0)


def item_score(
    record:                RatedRecord,
    global_average_rating: float,
    weights:               RankingWeights = DEFAULT_WEIGHTS,
) -> float:
    """Composite per-item score used to order records inside a group."""
    rating = record.rating or 0.0
    reviews = record.review_count or 0
    adjusted = bayesian_adjusted_rating(
        rating, reviews, global_average_rating, weights.prior_weight
    )
    return (
        adjusted * weights.item_rating_weight
        + popularity(reviews) * weights.item_popularity_weight
    )


@dataclass
class GroupScoreComponents:
    """All components of a group score.

    Attributes:
        bayesian_rating: Group average rating after Bayesian shrinkage.
        review_score:    0–1, normalized log review volume after penalty.
        count_score:     0–1, normalized log item count after penalty.
        review_penalty:  Multiplier applied for thin review evidence.
        count_penalty:   Multiplier applied for very small groups.
        weights:         Weights used to combine the components.
    """

    bayesian_rating: float
    review_score:    float
    count_score:     float
    review_penalty:  float
    count_penalty:   float
    weights:         RankingWeights = DEFAULT_WEIGHTS

    @property
    def total(self) -> float:
        """Weighted group score."""
        return (
            self.bayesian_rating * self.weights.group_rating_weight
            + self.review_score  * self.weights.group_review_weight
            + self.count_score   * self.weights.group_count_weight
        )

    def as_dict(self) -> dict[str, float]:
        return {
            "bayesian_rating": self.bayesian_rating,
            "review_score":    self.review_score,
            "count_score":     self.count_score,
            "review_penalty":  self.review_penalty,
            "count_penalty":   self.count_penalty,
            "total":           self.total,
        }


def review_penalty(total_reviews: int, weights: RankingWeights = DEFAULT_WEIGHTS) -> float:
    """Quadratic penalty for groups backed by fewer reviews than the threshold."""
    threshold = weights.review_penalty_threshold
    if threshold > 0 and total_reviews < threshold:
        return (max(0, total_reviews) / threshold) ** 2
    return 1.0


def count_penalty(item_count: int, weights: RankingWeights = DEFAULT_WEIGHTS) -> float:
    """Penalty for groups holding fewer distinct items than the threshold."""
    threshold = weights.count_penalty_threshold
    if threshold > 0 and item_count < threshold:
        return (max(0, item_count) / threshold) ** weights.count_penalty_exponent
    return 1.0


def observed_range(values: Iterable[float]) -> tuple[float, float]:
    """Return ``(min(0, lo), max(1, hi))`` over ``values``.

    Flooring at 0 and ceiling at 1 keeps the range non-degenerate when every
    group carries the same signal.
    """
    vals = list(values)
    if not vals:
        return 0.0, 1.0
    return min(0.0, min(vals)), max(1.0, max(vals))


def compute_group_components(
    average_rating:        float,
    total_reviews:         int,
    item_count:            int,
    global_average_rating: float,
    review_range:          tuple[float, float],
    count_range:           tuple[float, float],
    weights:               RankingWeights = DEFAULT_WEIGHTS,
) -> GroupScoreComponents:
    """Compute the group score components for one ranking group.

    Args:
        average_rating:        Mean rating over the group's surviving items.
        total_reviews:         Sum of review counts over those items.
        item_count:            Number of surviving items.
        global_average_rating: Dataset-wide prior mean ``C``.
        review_range:          ``(rMin, rMax)`` over ``log10(T + 1)`` of all groups.
        count_range:           ``(cMin, cMax)`` over ``log10(n + 1)`` of all groups.
        weights:               Ranking constants.

    Returns:
        GroupScoreComponents with all fields populated.
    """
    r_pen = review_penalty(total_reviews, weights)
    c_pen = count_penalty(item_count, weights)

    review_norm = normalize01(popularity(total_reviews), *review_range)
    count_norm = normalize01(popularity(item_count), *count_range)

    return GroupScoreComponents(
        bayesian_rating=bayesian_adjusted_rating(
            average_rating, total_reviews, global_average_rating, weights.prior_weight
        ),
        review_score=review_norm * r_pen,
        count_score=max(0.0, count_norm) ** weights.count_score_exponent * c_pen,
        review_penalty=r_pen,
        count_penalty=c_pen,
        weights=weights,
    )
