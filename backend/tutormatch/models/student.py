"""
TutorMatch Backend — Student Model
====================================

What:  ORM model for the `students` table.
Who:   Auth (signup/login), StudentService (profile), BookingService.
"""

from typing import TYPE_CHECKING, List

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tutormatch.database import Base
from tutormatch.models.mixins import IdMixin, TimestampMixin

if TYPE_CHECKING:
    from tutormatch.models.booking import Booking


class Student(IdMixin, TimestampMixin, Base):
    """A learner who books sessions and reviews tutors."""

    __tablename__ = "students"

    name: Mapped[str] = mapped_column(String(120), nullable=False)
    username: Mapped[str] = mapped_column(String(80), nullable=False, unique=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    # argon2 encoded hash; never serialized
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str] = mapped_column(String(32), nullable=False, default="1234567890")

    # Back-reference: derived from bookings.student_id
    bookings: Mapped[List["Booking"]] = relationship(back_populates="student")

    def __repr__(self) -> str:
        return f"<Student(id={self.id}, username='{self.username}')>"
