"""
TutorMatch Backend — Tutor Model
==================================

What:  ORM model for the `tutors` table.
Who:   Auth (signup/login), TutorService (search/profile), BookingService
       (availability lookup), RatingAggregator (rating write-back).

Table Design Rationale:
    - availability: JSON list of {"day": "Monday", "slots": [{"startTime",
      "endTime"}]}. It is always read and written as a whole, validated and
      normalized by services.availability before it is stored.
    - subjects / locations: JSON string lists, matched in Python by the
      search service so the same query works on PostgreSQL and SQLite.
    - rating_average / rating_total: denormalized summary of the reviews
      table, rewritten by RatingAggregator.recompute() after every review
      create/delete. Never updated incrementally.
"""

from typing import TYPE_CHECKING, Any, Dict, List, Optional

from sqlalchemy import JSON, Boolean, Float, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tutormatch.database import Base
from tutormatch.models.mixins import IdMixin, TimestampMixin

if TYPE_CHECKING:
    from tutormatch.models.booking import Booking
    from tutormatch.models.review import Review


class Tutor(IdMixin, TimestampMixin, Base):
    """A tutor offering sessions in one or more subjects and locations."""

    __tablename__ = "tutors"

    name: Mapped[str] = mapped_column(String(120), nullable=False)
    username: Mapped[str] = mapped_column(String(80), nullable=False, unique=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    profession: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    about: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # Hourly price in the configured payment currency
    price: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    subjects: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    locations: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    availability: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)

    # ── Contact ───────────────────────────────────────────────────────────
    phone: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    whatsapp: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    zoom: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # ── Rating summary ────────────────────────────────────────────────────
    rating_average: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    rating_total: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Back-references derived from bookings.tutor_id / reviews.tutor_id
    bookings: Mapped[List["Booking"]] = relationship(back_populates="tutor")
    reviews: Mapped[List["Review"]] = relationship(back_populates="tutor")

    # Search and recommendations both sort by rating
    __table_args__ = (
        Index("idx_tutors_rating_average", rating_average.desc()),
    )

    def __repr__(self) -> str:
        return (
            f"<Tutor(id={self.id}, username='{self.username}', "
            f"rating={self.rating_average:.2f}/{self.rating_total})>"
        )
