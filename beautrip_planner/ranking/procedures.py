"""
Per-procedure ranking: every offer of the same treatment name, across
hospitals, collapsed into one ranked entry.

Recommendation score
--------------------
  score = 40 * rating
        + 30 * log10(review_count + 1)
        + price_score                 20 when 0 < price < 1,000,000 KRW, else 10
        + 0.1 * discount_rate

A procedure is scored through a representative record: its best-rated offer,
carrying the procedure's average positive rating and total review count.
Price and discount therefore come from that best-rated offer.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Optional, Sequence

from beautrip_planner.models.treatment import TreatmentRecord

logger = logging.getLogger(__name__)

RATING_POINTS = 40.0
REVIEW_POINTS = 30.0
PRICE_CEILING = 1_000_000
LISTED_PRICE_POINTS = 20.0
UNLISTED_PRICE_POINTS = 10.0
DISCOUNT_FACTOR = 0.1
TOP_TREATMENTS = 3


@dataclass
class TreatmentRanking:
    """One procedure name with its aggregated offers."""

    treatment_name:       str
    treatments:           list[TreatmentRecord] = field(default_factory=list)
    average_rating:       float = 0.0
    total_reviews:        int = 0
    average_price:        float = 0.0
    recommendation_score: float = 0.0
    top_treatments:       list[TreatmentRecord] = field(default_factory=list)

    @property
    def offer_count(self) -> int:
        return len(self.treatments)


def recommendation_score(
    rating:        float,
    review_count:  int,
    selling_price: Optional[float] = None,
    discount_rate: Optional[float] = None,
) -> float:
    """Popularity-and-price score of a single offer (see module docstring)."""
    price = selling_price or 0.0
    price_points = (
        LISTED_PRICE_POINTS if 0 < price < PRICE_CEILING else UNLISTED_PRICE_POINTS
    )
    return (
        rating * RATING_POINTS
        + math.log10(max(0, review_count) + 1) * REVIEW_POINTS
        + price_points
        + (discount_rate or 0.0) * DISCOUNT_FACTOR
    )


def _mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def rank_treatments(records: Sequence[TreatmentRecord]) -> list[TreatmentRanking]:
    """Group ``records`` by treatment name and rank by recommendation score.

    Averages ignore unrated offers and unlisted prices.  ``top_treatments``
    holds the three best-rated offers; ties keep catalogue order, as does the
    final ordering for equal scores.
    """
    by_name: dict[str, list[TreatmentRecord]] = {}
    for record in records:
        by_name.setdefault(record.name, []).append(record)

    rankings: list[TreatmentRanking] = []
    for name, offers in by_name.items():
        average_rating = _mean([o.rating for o in offers if o.rating > 0])
        total_reviews = sum(o.review_count for o in offers)
        top = sorted(offers, key=lambda o: -o.rating)[:TOP_TREATMENTS]
        best = top[0]

        rankings.append(
            TreatmentRanking(
                treatment_name=name,
                treatments=list(offers),
                average_rating=average_rating,
                total_reviews=total_reviews,
                average_price=_mean(
                    [o.selling_price for o in offers if (o.selling_price or 0) > 0]
                ),
                recommendation_score=recommendation_score(
                    average_rating, total_reviews, best.selling_price, best.discount_rate
                ),
                top_treatments=top,
            )
        )

    logger.debug("Ranked %d procedures from %d offers", len(rankings), len(records))
    return sorted(rankings, key=lambda r: -r.recommendation_score)
