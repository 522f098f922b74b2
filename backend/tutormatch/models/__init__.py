"""
TutorMatch Backend — ORM Models
================================

Importing this package registers every table with Base.metadata, which is
what Alembic autogenerate and the test suite's create_all() rely on.

Ownership:
    Booking and Review rows are authoritative. Student.bookings,
    Tutor.bookings and Tutor.reviews are back-references derived from their
    foreign keys, never stored separately.
"""

from tutormatch.models.admin import Admin
from tutormatch.models.booking import Booking
from tutormatch.models.review import Review
from tutormatch.models.student import Student
from tutormatch.models.tutor import Tutor

__all__ = ["Admin", "Booking", "Review", "Student", "Tutor"]
