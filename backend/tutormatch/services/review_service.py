"""
TutorMatch Backend — Review Service
=====================================

What:  Create, list and delete tutor reviews, keeping the tutor's rating
       summary in step with the review set.
Who:   Called by routes/reviews.py.

Write Flow (create and delete):
    ┌──────────────┐    ┌────────────────┐    ┌─────────────────────┐
    │ Lock tutor   │───▶│ Insert/delete  │───▶│ RatingAggregator    │
    │ (FOR UPDATE) │    │ review row     │    │ .recompute(tutor)   │
    └──────────────┘    └────────────────┘    └─────────────────────┘

    All three steps share the request transaction. If the recompute fails the
    review write is rolled back with it, so the summary never disagrees with
    the committed reviews.

Eligibility:
    One review per (student, tutor) pair. With
    settings.require_completed_booking_for_review enabled the student must
    also have a completed session with the tutor.
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tutormatch.config import settings
from tutormatch.exceptions import ConflictError, ForbiddenError, NotFoundError
from tutormatch.models import Booking, Review, Tutor
from tutormatch.models.booking import COMPLETED
from tutormatch.schemas.review import ReviewCreate, ReviewResponse
from tutormatch.security import Principal
from tutormatch.services.rating import rating_aggregator

logger = logging.getLogger(__name__)


def review_to_response(review: Review, student_name: Optional[str] = None) -> ReviewResponse:
    return ReviewResponse(
        id=review.id,
        student_id=review.student_id,
        tutor_id=review.tutor_id,
        rating=review.rating,
        comment=review.comment,
        created_at=review.created_at,
        student_name=student_name,
    )


class ReviewService:

    async def _lock_tutor(self, db: AsyncSession, tutor_id: uuid.UUID) -> Tutor:
        result = await db.execute(
            select(Tutor).where(Tutor.id == tutor_id).with_for_update()
        )
        tutor = result.scalar_one_or_none()
        if tutor is None:
            raise NotFoundError(resource="tutor", resource_id=str(tutor_id))
        return tutor

    async def create_review(
        self, db: AsyncSession, principal: Principal, payload: ReviewCreate
    ) -> ReviewResponse:
        """
        Record a student's review of a tutor and refresh the tutor's rating.

        Raises:
            NotFoundError: tutor does not exist
            ConflictError: the student already reviewed this tutor
            ForbiddenError: completed-session rule enabled and not met
        """
        tutor = await self._lock_tutor(db, payload.tutor_id)

        existing = await db.execute(
            select(Review.id).where(
                Review.student_id == principal.id, Review.tutor_id == tutor.id
            )
        )
        if existing.scalar_one_or_none() is not None:
            raise ConflictError(
                "You already reviewed this tutor",
                context={"student_id": str(principal.id), "tutor_id": str(tutor.id)},
            )

        if settings.require_completed_booking_for_review:
            completed = await db.execute(
                select(Booking.id)
                .where(
                    Booking.student_id == principal.id,
                    Booking.tutor_id == tutor.id,
                    Booking.status == COMPLETED,
                )
                .limit(1)
            )
            if completed.scalar_one_or_none() is None:
                raise ForbiddenError("You can only review tutors after a completed session")

        review = Review(
            student_id=principal.id,
            tutor_id=tutor.id,
            rating=payload.rating,
            comment=payload.comment,
        )
        db.add(review)
        try:
            await db.flush()
        except IntegrityError:
            raise ConflictError("You already reviewed this tutor")

        await rating_aggregator.recompute(db, tutor.id)
        logger.info(
            "Review %s created: student=%s tutor=%s rating=%d",
            review.id, principal.id, tutor.id, review.rating,
        )
        return review_to_response(review, student_name=principal.name or None)

    async def list_tutor_reviews(
        self, db: AsyncSession, tutor_id: uuid.UUID
    ) -> List[ReviewResponse]:
        """Reviews of one tutor, newest first, with each reviewer's name."""
        tutor = await db.get(Tutor, tutor_id)
        if tutor is None:
            raise NotFoundError(resource="tutor", resource_id=str(tutor_id))

        result = await db.execute(
            select(Review)
            .options(selectinload(Review.student))
            .where(Review.tutor_id == tutor_id)
            .order_by(Review.created_at.desc())
        )
        return [
            review_to_response(review, student_name=review.student.name)
            for review in result.scalars().all()
        ]

    async def delete_review(
        self, db: AsyncSession, principal: Principal, review_id: uuid.UUID
    ) -> None:
        """
        Delete a review (its author or an admin) and refresh the tutor's rating.

        Raises:
            NotFoundError: review does not exist
            ForbiddenError: caller is neither the author nor an admin
        """
        review = await db.get(Review, review_id)
        if review is None:
            raise NotFoundError(resource="review", resource_id=str(review_id))

        if not (principal.is_admin or principal.is_student(review.student_id)):
            raise ForbiddenError("Not authorized to delete this review")

        tutor_id = review.tutor_id
        await self._lock_tutor(db, tutor_id)
        await db.execute(delete(Review).where(Review.id == review_id))
        summary = await rating_aggregator.recompute(db, tutor_id)
        logger.info(
            "Review %s deleted by %s %s; tutor %s now %.2f/%d",
            review_id, principal.role, principal.id, tutor_id,
            summary.average, summary.total,
        )


review_service = ReviewService()
