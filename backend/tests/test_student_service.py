"""
TutorMatch Backend — Student Service Tests
============================================

What we test:
    ✅ Profile includes bookings with tutor names, newest first
    ✅ Password changes are refused on the profile endpoint
    ✅ Username/email clashes with another student → conflict
    ✅ Keeping one's own username/email is not a clash
"""

import pytest

from conftest import MONDAY, student_principal
from tutormatch.exceptions import ConflictError, ValidationError
from tutormatch.schemas.student import StudentUpdate
from tutormatch.services.student_service import StudentService


class TestStudentProfile:

    def setup_method(self):
        self.service = StudentService()

    @pytest.mark.asyncio
    async def test_profile_with_bookings(self, db_session, make_student, make_tutor, make_booking):
        student = await make_student()
        tutor = await make_tutor(name="Dr. Rao")
        await make_booking(student, tutor, booking_date=MONDAY)
        latest = await make_booking(student, tutor, booking_date=MONDAY.replace(day=29))

        profile = await self.service.get_profile(db_session, student_principal(student))

        assert profile.username == student.username
        assert profile.bookings[0].id == latest.id
        assert profile.bookings[0].tutor.name == "Dr. Rao"
        assert [b.student.id for b in profile.bookings] == [student.id, student.id]
        assert profile.bookings[1].student.email == student.email

    @pytest.mark.asyncio
    async def test_update_with_bookings_returns_profile(
        self, db_session, make_student, make_tutor, make_booking
    ):
        student, tutor = await make_student(), await make_tutor()
        booking = await make_booking(student, tutor)

        profile = await self.service.update_profile(
            db_session, student_principal(student), StudentUpdate(name="Renamed")
        )

        assert profile.name == "Renamed"
        assert [b.id for b in profile.bookings] == [booking.id]
        assert profile.bookings[0].student.name == "Renamed"

    @pytest.mark.asyncio
    async def test_default_phone(self, db_session, make_student):
        student = await make_student()
        profile = await self.service.get_profile(db_session, student_principal(student))
        assert profile.phone == "1234567890"

    @pytest.mark.asyncio
    async def test_password_refused(self, db_session, make_student):
        student = await make_student()
        with pytest.raises(ValidationError, match="password endpoint") as exc_info:
            await self.service.update_profile(
                db_session, student_principal(student), StudentUpdate(password="new-secret")
            )
        assert exc_info.value.field == "password"

    @pytest.mark.asyncio
    async def test_update_fields(self, db_session, make_student):
        student = await make_student()
        profile = await self.service.update_profile(
            db_session,
            student_principal(student),
            StudentUpdate(name="Renamed", email="NEW@example.com", phone="999"),
        )
        assert profile.name == "Renamed"
        assert profile.email == "new@example.com"
        assert profile.phone == "999"
        assert profile.username == student.username

    @pytest.mark.asyncio
    async def test_taken_username_conflicts(self, db_session, make_student):
        student = await make_student()
        other = await make_student()
        with pytest.raises(ConflictError, match="Username or email already exists"):
            await self.service.update_profile(
                db_session, student_principal(student), StudentUpdate(username=other.username)
            )

    @pytest.mark.asyncio
    async def test_own_values_not_a_clash(self, db_session, make_student):
        student = await make_student()
        profile = await self.service.update_profile(
            db_session,
            student_principal(student),
            StudentUpdate(username=student.username, email=student.email),
        )
        assert profile.id == student.id
