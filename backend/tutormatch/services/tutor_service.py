"""
TutorMatch Backend — Tutor Service
====================================

What:  Public tutor search, recommendations and detail, plus the logged-in
       tutor's own profile read/update.
Who:   Called by routes/tutors.py and routes/admin.py (tutor_to_public).

Search:
    Price and minimum rating are filtered in SQL. Subject and location are
    JSON lists, matched case-insensitively in Python after the SQL filter so
    the same query works on PostgreSQL and SQLite. Results are ordered by
    rating_average, best first.
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tutormatch.exceptions import DatabaseError, NotFoundError
from tutormatch.models import Booking, Tutor
from tutormatch.schemas.tutor import (
    RatingSummaryResponse,
    TutorBookingSummary,
    TutorContact,
    TutorProfile,
    TutorPublic,
    TutorUpdate,
)
from tutormatch.security import Principal
from tutormatch.services.availability import validate_availability

logger = logging.getLogger(__name__)

# Nullable columns a PATCH may clear by sending null
_CLEARABLE_FIELDS = ("profession", "about", "phone", "whatsapp", "zoom")


def tutor_to_public(tutor: Tutor) -> TutorPublic:
    return TutorPublic(
        id=tutor.id,
        name=tutor.name,
        username=tutor.username,
        profession=tutor.profession,
        about=tutor.about,
        price=tutor.price,
        subjects=tutor.subjects or [],
        locations=tutor.locations or [],
        availability=tutor.availability or [],
        contact=TutorContact(phone=tutor.phone, whatsapp=tutor.whatsapp, zoom=tutor.zoom),
        rating=RatingSummaryResponse(
            average=tutor.rating_average, total=tutor.rating_total
        ),
        is_verified=tutor.is_verified,
        created_at=tutor.created_at,
    )


def _matches(values: List[str], wanted: Optional[str]) -> bool:
    if not wanted:
        return True
    wanted = wanted.strip().lower()
    return any(value.lower() == wanted for value in values or [])


class TutorService:

    async def search_tutors(
        self,
        db: AsyncSession,
        subject: Optional[str] = None,
        location: Optional[str] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        min_rating: Optional[float] = None,
    ) -> List[TutorPublic]:
        """
        Find tutors matching every given filter, best rated first.

        Args:
            subject: exact subject name (case-insensitive)
            location: exact location name (case-insensitive)
            min_price / max_price: inclusive hourly price bounds
            min_rating: minimum rating_average
        """
        query = select(Tutor)
        if min_price is not None:
            query = query.where(Tutor.price >= min_price)
        if max_price is not None:
            query = query.where(Tutor.price <= max_price)
        if min_rating is not None:
            query = query.where(Tutor.rating_average >= min_rating)
        query = query.order_by(Tutor.rating_average.desc(), Tutor.rating_total.desc())

        try:
            result = await db.execute(query)
        except SQLAlchemyError as e:
            logger.error("Database error searching tutors: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not search tutors. Please try again.",
                context={"error_type": type(e).__name__},
            )

        return [
            tutor_to_public(tutor)
            for tutor in result.scalars().all()
            if _matches(tutor.subjects, subject) and _matches(tutor.locations, location)
        ]

    async def recommended_tutors(self, db: AsyncSession, limit: int = 10) -> List[TutorPublic]:
        """Top-rated verified tutors."""
        result = await db.execute(
            select(Tutor)
            .where(Tutor.is_verified.is_(True))
            .order_by(Tutor.rating_average.desc(), Tutor.rating_total.desc())
            .limit(limit)
        )
        return [tutor_to_public(tutor) for tutor in result.scalars().all()]

    async def get_tutor(self, db: AsyncSession, tutor_id: uuid.UUID) -> TutorPublic:
        tutor = await db.get(Tutor, tutor_id)
        if tutor is None:
            raise NotFoundError(resource="tutor", resource_id=str(tutor_id))
        return tutor_to_public(tutor)

    async def get_profile(self, db: AsyncSession, principal: Principal) -> TutorProfile:
        """The tutor's own profile, including email and every booking."""
        result = await db.execute(
            select(Tutor)
            .options(selectinload(Tutor.bookings).selectinload(Booking.student))
            .where(Tutor.id == principal.id)
            .execution_options(populate_existing=True)
        )
        tutor = result.scalar_one_or_none()
        if tutor is None:
            raise NotFoundError(resource="tutor", resource_id=str(principal.id))

        bookings = sorted(
            tutor.bookings, key=lambda b: (b.date, b.start_time), reverse=True
        )
        return TutorProfile(
            **tutor_to_public(tutor).model_dump(),
            email=tutor.email,
            bookings=[
                TutorBookingSummary(
                    id=booking.id,
                    student_id=booking.student_id,
                    student_name=booking.student.name,
                    subject=booking.subject,
                    date=booking.date,
                    start_time=booking.start_time,
                    end_time=booking.end_time,
                    status=booking.status,
                    payment_status=booking.payment_status,
                )
                for booking in bookings
            ],
        )

    async def update_profile(
        self, db: AsyncSession, principal: Principal, payload: TutorUpdate
    ) -> TutorProfile:
        """
        Apply a partial profile update. Only fields present in the request
        change; a new availability replaces the old one after validation.

        Raises:
            ValidationError: malformed availability
        """
        tutor = await db.get(Tutor, principal.id)
        if tutor is None:
            raise NotFoundError(resource="tutor", resource_id=str(principal.id))

        changes = payload.model_dump(exclude_unset=True, by_alias=True)
        if "availability" in changes:
            tutor.availability = validate_availability(changes.pop("availability") or [])

        for field, value in changes.items():
            if value is None and field not in _CLEARABLE_FIELDS:
                continue
            setattr(tutor, field, value)

        await db.flush()
        logger.info("Tutor %s updated profile fields: %s", tutor.id, sorted(payload.model_fields_set))
        return await self.get_profile(db, principal)


tutor_service = TutorService()
