"""
TutorMatch Backend — Booking Service
======================================

What:  Conflict checking, booking creation, status changes and deletion.
Who:   Called by routes/bookings.py; reads tutors, writes bookings.

Creation Flow (POST /api/bookings):
    ┌──────────────┐    ┌──────────────────┐    ┌──────────────┐    ┌────────┐
    │ Lock tutor   │───▶│ Weekday + exact  │───▶│ Active slot  │───▶│ Insert │
    │ (FOR UPDATE) │    │ slot match       │    │ already held?│    │pending │
    └──────────────┘    └──────────────────┘    └──────────────┘    └────────┘

    Every failed check is a ConflictError with the client-facing message:
        "Tutor is unavailable on this day" / "Invalid time slot" /
        "Slot already booked"

Race Handling:
    check-then-insert is a classic race. The tutor row lock serializes
    booking creation per tutor for the rest of the transaction; the partial
    unique index uq_bookings_active_slot rejects a duplicate that slips past
    (e.g. on a backend that ignores FOR UPDATE), and that IntegrityError is
    reported as the same "Slot already booked" conflict.

Back-references:
    A new booking shows up in Student.bookings and Tutor.bookings through
    its foreign keys; deleting the row removes it from both and nowhere else.
"""

import logging
import uuid
from datetime import date
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tutormatch.exceptions import ConflictError, DatabaseError, NotFoundError, UnauthorizedError
from tutormatch.models import Booking, Student, Tutor
from tutormatch.models.booking import BLOCKING_STATUSES, PAYMENT_PENDING, PENDING
from tutormatch.schemas.booking import BookingCreate, BookingResponse, PartySummary
from tutormatch.security import Principal
from tutormatch.services.availability import find_day, has_exact_slot, weekday_name
from tutormatch.services.booking_lifecycle import authorize_transition

logger = logging.getLogger(__name__)


def booking_to_response(
    booking: Booking,
    include_parties: bool = False,
    student: Optional[Student] = None,
) -> BookingResponse:
    """
    Build the API representation of a booking.

    include_parties requires booking.tutor, and booking.student unless the
    owning `student` is passed in, to be eagerly loaded; async sessions
    cannot lazy-load them here.
    """
    response = BookingResponse(
        id=booking.id,
        student_id=booking.student_id,
        tutor_id=booking.tutor_id,
        subject=booking.subject,
        date=booking.date,
        start_time=booking.start_time,
        end_time=booking.end_time,
        location=booking.location,
        status=booking.status,
        payment_status=booking.payment_status,
        transaction_id=booking.transaction_id,
        created_at=booking.created_at,
        updated_at=booking.updated_at,
    )
    if include_parties:
        owner = student if student is not None else booking.student
        response.student = PartySummary(id=owner.id, name=owner.name, email=owner.email)
        response.tutor = PartySummary(
            id=booking.tutor.id, name=booking.tutor.name, profession=booking.tutor.profession
        )
    return response


class BookingService:
    """
    Business logic for bookings.

    Stateless: every method receives the request's session. Methods flush but
    never commit; get_db_session() commits when the request succeeds.
    """

    # ── Conflict checking ─────────────────────────────────────────────────

    async def check_availability(
        self,
        db: AsyncSession,
        tutor_id: uuid.UUID,
        booking_date: date,
        start_time: str,
        end_time: str,
    ) -> None:
        """
        Read-only conflict check for a requested slot.

        Raises:
            NotFoundError: tutor does not exist
            ConflictError: day unavailable, slot not declared, or slot taken
        """
        tutor = await db.get(Tutor, tutor_id)
        if tutor is None:
            raise NotFoundError(resource="tutor", resource_id=str(tutor_id))
        await self._check_slot(db, tutor, booking_date, start_time, end_time)

    async def _check_slot(
        self,
        db: AsyncSession,
        tutor: Tutor,
        booking_date: date,
        start_time: str,
        end_time: str,
    ) -> None:
        day = weekday_name(booking_date)
        entry = find_day(tutor.availability or [], day)
        if entry is None:
            raise ConflictError(
                "Tutor is unavailable on this day",
                context={"tutor_id": str(tutor.id), "day": day},
            )

        if not has_exact_slot(entry, start_time, end_time):
            raise ConflictError(
                "Invalid time slot",
                context={"tutor_id": str(tutor.id), "day": day, "slot": f"{start_time}-{end_time}"},
            )

        # Only active bookings hold a slot; cancelled and completed ones never block
        result = await db.execute(
            select(Booking.id)
            .where(
                Booking.tutor_id == tutor.id,
                Booking.date == booking_date,
                Booking.start_time == start_time,
                Booking.end_time == end_time,
                Booking.status.in_(sorted(BLOCKING_STATUSES)),
            )
            .limit(1)
        )
        if result.scalar_one_or_none() is not None:
            raise ConflictError(
                "Slot already booked",
                context={"tutor_id": str(tutor.id), "date": booking_date.isoformat()},
            )

    # ── Creation ──────────────────────────────────────────────────────────

    async def create_booking(
        self,
        db: AsyncSession,
        principal: Principal,
        payload: BookingCreate,
    ) -> BookingResponse:
        """
        Check the requested slot and create a pending booking for the student.

        Args:
            db: Async database session
            principal: The authenticated student
            payload: tutor, date, slot bounds, subject, optional location

        Returns:
            BookingResponse for the new booking (HTTP 201)

        Raises:
            NotFoundError: tutor does not exist
            ConflictError: slot unavailable or already booked
        """
        result = await db.execute(
            select(Tutor).where(Tutor.id == payload.tutor_id).with_for_update()
        )
        tutor = result.scalar_one_or_none()
        if tutor is None:
            raise NotFoundError(resource="tutor", resource_id=str(payload.tutor_id))

        try:
            await self._check_slot(
                db, tutor, payload.date, payload.start_time, payload.end_time
            )
        except ConflictError as e:
            logger.info(
                "Booking rejected for tutor %s on %s %s-%s: %s",
                tutor.id, payload.date, payload.start_time, payload.end_time, e.message,
            )
            raise

        booking = Booking(
            student_id=principal.id,
            tutor_id=tutor.id,
            subject=payload.subject,
            date=payload.date,
            start_time=payload.start_time,
            end_time=payload.end_time,
            location=payload.location,
            status=PENDING,
            payment_status=PAYMENT_PENDING,
        )
        db.add(booking)
        try:
            await db.flush()
        except IntegrityError:
            logger.warning(
                "Concurrent booking lost the race for tutor %s on %s %s-%s",
                tutor.id, payload.date, payload.start_time, payload.end_time,
            )
            raise ConflictError("Slot already booked")

        logger.info(
            "Booking %s created: student=%s tutor=%s %s %s-%s",
            booking.id, principal.id, tutor.id,
            booking.date, booking.start_time, booking.end_time,
        )
        return booking_to_response(booking)

    # ── Reads ─────────────────────────────────────────────────────────────

    async def get_booking(
        self, db: AsyncSession, principal: Principal, booking_id: uuid.UUID
    ) -> BookingResponse:
        """Booking detail for one of its parties or an admin."""
        result = await db.execute(
            select(Booking)
            .options(selectinload(Booking.student), selectinload(Booking.tutor))
            .where(Booking.id == booking_id)
        )
        booking = result.scalar_one_or_none()
        if booking is None:
            raise NotFoundError(resource="booking", resource_id=str(booking_id))

        if not (
            principal.is_admin
            or principal.is_student(booking.student_id)
            or principal.is_tutor(booking.tutor_id)
        ):
            raise UnauthorizedError("Not authorized to view this booking")

        return booking_to_response(booking, include_parties=True)

    async def list_student_bookings(
        self, db: AsyncSession, principal: Principal
    ) -> List[BookingResponse]:
        return await self._list(db, Booking.student_id == principal.id)

    async def list_tutor_bookings(
        self, db: AsyncSession, principal: Principal
    ) -> List[BookingResponse]:
        return await self._list(db, Booking.tutor_id == principal.id)

    async def _list(self, db: AsyncSession, criterion) -> List[BookingResponse]:
        # Most recent session date first
        try:
            result = await db.execute(
                select(Booking)
                .options(selectinload(Booking.student), selectinload(Booking.tutor))
                .where(criterion)
                .order_by(Booking.date.desc(), Booking.start_time.desc())
            )
        except SQLAlchemyError as e:
            logger.error("Database error listing bookings: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve bookings. Please try again.",
                context={"error_type": type(e).__name__},
            )
        return [
            booking_to_response(booking, include_parties=True)
            for booking in result.scalars().all()
        ]

    # ── Lifecycle ─────────────────────────────────────────────────────────

    async def update_status(
        self,
        db: AsyncSession,
        principal: Principal,
        booking_id: uuid.UUID,
        status: str,
    ) -> BookingResponse:
        """
        Apply a status change requested by one of the booking's parties.

        The booking row is locked so two parties acting at once (tutor
        confirming while the student cancels) are applied one after the
        other, and the second sees the first's result.

        Raises:
            NotFoundError: booking does not exist
            UnauthorizedError: not a party, or target not allowed for the role
            ConflictError: booking is terminal or target unreachable
        """
        result = await db.execute(
            select(Booking).where(Booking.id == booking_id).with_for_update()
        )
        booking = result.scalar_one_or_none()
        if booking is None:
            raise NotFoundError(resource="booking", resource_id=str(booking_id))

        authorize_transition(principal, booking, status)

        previous = booking.status
        booking.status = status
        await db.flush()

        logger.info(
            "Booking %s status %s -> %s by %s %s",
            booking.id, previous, status, principal.role, principal.id,
        )
        return booking_to_response(booking)

    async def delete_booking(self, db: AsyncSession, booking_id: uuid.UUID) -> None:
        """
        Hard-delete a booking in any state (admin action).

        The row is the only record of the relationship, so both parties'
        back-references disappear with it.
        """
        booking = await db.get(Booking, booking_id)
        if booking is None:
            raise NotFoundError(resource="booking", resource_id=str(booking_id))

        await db.execute(delete(Booking).where(Booking.id == booking_id))
        await db.flush()
        logger.info(
            "Booking %s deleted (student=%s tutor=%s status=%s)",
            booking_id, booking.student_id, booking.tutor_id, booking.status,
        )


booking_service = BookingService()
