"""
TutorMatch Backend — Booking Model
====================================

What:  ORM model for the `bookings` table, the shared relationship record
       between one student and one tutor.
Who:   BookingService (create, status changes, delete), PaymentService.

Lifecycle:
    1. Created by a student after the conflict check (status='pending',
       payment_status='pending')
    2. Status changes only through services.booking_lifecycle rules
    3. Hard-deleted by an admin, regardless of status

Uniqueness:
    uq_bookings_active_slot is a partial unique index over
    (tutor_id, date, start_time, end_time) restricted to active statuses.
    Two active bookings for the same tutor slot cannot both commit, while
    any number of cancelled or completed ones may share it.
"""

import datetime as dt
import uuid
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Date, ForeignKey, Index, String, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tutormatch.database import Base
from tutormatch.models.mixins import IdMixin, TimestampMixin

if TYPE_CHECKING:
    from tutormatch.models.student import Student
    from tutormatch.models.tutor import Tutor

PENDING = "pending"
CONFIRMED = "confirmed"
COMPLETED = "completed"
CANCELLED = "cancelled"
BOOKING_STATUSES = (PENDING, CONFIRMED, COMPLETED, CANCELLED)

PAYMENT_PENDING = "pending"
PAYMENT_PAID = "paid"
PAYMENT_REFUNDED = "refunded"
PAYMENT_STATUSES = (PAYMENT_PENDING, PAYMENT_PAID, PAYMENT_REFUNDED)

# Statuses that hold a slot. Must match the partial index predicate below.
BLOCKING_STATUSES = frozenset({PENDING, CONFIRMED})

_ACTIVE_SLOT_PREDICATE = text("status IN ('pending', 'confirmed')")


class Booking(IdMixin, TimestampMixin, Base):
    """A reservation of one tutor slot on one calendar date by one student."""

    __tablename__ = "bookings"

    student_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True
    )
    tutor_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("tutors.id", ondelete="CASCADE"), nullable=False, index=True
    )
    subject: Mapped[str] = mapped_column(String(120), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    # "HH:MM", zero-padded 24h; equal to one declared slot of the tutor
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    status: Mapped[str] = mapped_column(String(20), nullable=False, default=PENDING)
    payment_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PAYMENT_PENDING
    )
    # Payment-intent id issued by PaymentService
    transaction_id: Mapped[Optional[str]] = mapped_column(
        String(64), nullable=True, unique=True
    )

    student: Mapped["Student"] = relationship(back_populates="bookings")
    tutor: Mapped["Tutor"] = relationship(back_populates="bookings")

    __table_args__ = (
        Index(
            "uq_bookings_active_slot",
            "tutor_id",
            "date",
            "start_time",
            "end_time",
            unique=True,
            postgresql_where=_ACTIVE_SLOT_PREDICATE,
            sqlite_where=_ACTIVE_SLOT_PREDICATE,
        ),
    )

    @property
    def duration_minutes(self) -> int:
        """Length of the booked slot; slots never cross midnight."""
        start_h, start_m = (int(part) for part in self.start_time.split(":"))
        end_h, end_m = (int(part) for part in self.end_time.split(":"))
        return (end_h * 60 + end_m) - (start_h * 60 + start_m)

    def __repr__(self) -> str:
        return (
            f"<Booking(id={self.id}, tutor_id={self.tutor_id}, date={self.date}, "
            f"{self.start_time}-{self.end_time}, status='{self.status}')>"
        )
