"""TutorMatch Backend — Student Service (own profile read/update)."""

import logging

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tutormatch.exceptions import ConflictError, NotFoundError, ValidationError
from tutormatch.models import Booking, Student
from tutormatch.schemas.student import StudentProfile, StudentUpdate
from tutormatch.security import Principal
from tutormatch.services.booking_service import booking_to_response

logger = logging.getLogger(__name__)


class StudentService:

    async def get_profile(self, db: AsyncSession, principal: Principal) -> StudentProfile:
        result = await db.execute(
            select(Student)
            # Booking.student is the row being loaded; it is passed down rather
            # than loaded again through the collection
            .options(selectinload(Student.bookings).selectinload(Booking.tutor))
            .where(Student.id == principal.id)
            .execution_options(populate_existing=True)
        )
        student = result.scalar_one_or_none()
        if student is None:
            raise NotFoundError(resource="student", resource_id=str(principal.id))

        bookings = sorted(
            student.bookings, key=lambda b: (b.date, b.start_time), reverse=True
        )
        return StudentProfile(
            id=student.id,
            name=student.name,
            username=student.username,
            email=student.email,
            phone=student.phone,
            created_at=student.created_at,
            bookings=[
                booking_to_response(b, include_parties=True, student=student) for b in bookings
            ],
        )

    async def update_profile(
        self, db: AsyncSession, principal: Principal, payload: StudentUpdate
    ) -> StudentProfile:
        """
        Update name, username, email or phone.

        Raises:
            ValidationError: the body includes a password
            ConflictError: new username or email belongs to another student
        """
        if payload.password is not None:
            raise ValidationError(
                "Use the password endpoint to change your password", field="password"
            )

        student = await db.get(Student, principal.id)
        if student is None:
            raise NotFoundError(resource="student", resource_id=str(principal.id))

        changes = {
            field: value
            for field, value in payload.model_dump(exclude_unset=True, exclude={"password"}).items()
            if value is not None
        }
        if "email" in changes:
            changes["email"] = changes["email"].lower()

        clashes = []
        if "username" in changes:
            clashes.append(Student.username == changes["username"])
        if "email" in changes:
            clashes.append(Student.email == changes["email"])
        if clashes:
            taken = await db.execute(
                select(Student.id)
                .where(or_(*clashes), Student.id != student.id)
                .limit(1)
            )
            if taken.scalar_one_or_none() is not None:
                raise ConflictError("Username or email already exists")

        for field, value in changes.items():
            setattr(student, field, value)
        try:
            await db.flush()
        except IntegrityError:
            raise ConflictError("Username or email already exists")

        logger.info("Student %s updated profile fields: %s", student.id, sorted(changes))
        return await self.get_profile(db, principal)


student_service = StudentService()
