"""
TutorMatch Backend — Rating Aggregator
========================================

What:  Recomputes a tutor's {average, total} rating from their reviews.
Who:   ReviewService, after every review create and delete.

Full recompute, not a delta:
    recompute() reads the tutor's current review set and overwrites the
    summary. Running it twice in a row gives the same result, and a missed
    or duplicated call cannot drift the stored numbers.

Serialization:
    The caller must hold the tutor row lock (ReviewService takes it with
    SELECT ... FOR UPDATE before writing the review). Two concurrent review
    writes for the same tutor therefore recompute one after the other, each
    seeing the other's committed review.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Iterable

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from tutormatch.models import Review, Tutor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RatingSummary:
    average: float
    total: int


def summarize(ratings: Iterable[int]) -> RatingSummary:
    """
    Mean and count of a set of ratings. No rounding; display code rounds.

    Example:
        summarize([4, 5, 3]) -> RatingSummary(average=4.0, total=3)
        summarize([])        -> RatingSummary(average=0.0, total=0)
    """
    values = list(ratings)
    if not values:
        return RatingSummary(average=0.0, total=0)
    return RatingSummary(average=sum(values) / len(values), total=len(values))


class RatingAggregator:

    async def recompute(self, db: AsyncSession, tutor_id: uuid.UUID) -> RatingSummary:
        """Read all ratings for the tutor and write the summary back."""
        result = await db.execute(select(Review.rating).where(Review.tutor_id == tutor_id))
        summary = summarize(result.scalars().all())

        await db.execute(
            update(Tutor)
            .where(Tutor.id == tutor_id)
            .values(rating_average=summary.average, rating_total=summary.total)
        )
        logger.info(
            "Rating recomputed for tutor %s: average=%.3f total=%d",
            tutor_id,
            summary.average,
            summary.total,
        )
        return summary


rating_aggregator = RatingAggregator()
