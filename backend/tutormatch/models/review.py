"""
TutorMatch Backend — Review Model
===================================

What:  ORM model for the `reviews` table.
Who:   ReviewService (create/list/delete) and RatingAggregator (reads ratings).

uq_reviews_student_tutor enforces one review per (student, tutor) pair at
the store level, behind the service's own duplicate check.
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tutormatch.database import Base
from tutormatch.models.mixins import IdMixin, utcnow

if TYPE_CHECKING:
    from tutormatch.models.student import Student
    from tutormatch.models.tutor import Tutor


class Review(IdMixin, Base):
    __tablename__ = "reviews"

    student_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("students.id", ondelete="CASCADE"), nullable=False
    )
    tutor_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("tutors.id", ondelete="CASCADE"), nullable=False, index=True
    )
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    student: Mapped["Student"] = relationship()
    tutor: Mapped["Tutor"] = relationship(back_populates="reviews")

    __table_args__ = (
        UniqueConstraint("student_id", "tutor_id", name="uq_reviews_student_tutor"),
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_reviews_rating_range"),
    )

    def __repr__(self) -> str:
        return f"<Review(id={self.id}, tutor_id={self.tutor_id}, rating={self.rating})>"
