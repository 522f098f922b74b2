"""
TutorMatch Backend — Tutor Service Tests
==========================================

What we test:
    ✅ Search filters: subject/location (case-insensitive), price range, rating
    ✅ Ordering by average rating
    ✅ Recommended: verified tutors only
    ✅ Profile: bookings with student names, newest first
    ✅ Partial updates, availability re-validation, clearing contact fields
"""

import uuid

import pytest

from conftest import MONDAY, tutor_principal
from tutormatch.exceptions import NotFoundError, ValidationError
from tutormatch.schemas.tutor import TutorUpdate
from tutormatch.services.tutor_service import TutorService


class TestSearch:

    def setup_method(self):
        self.service = TutorService()

    @pytest.mark.asyncio
    async def test_no_filters_returns_all_best_first(self, db_session, make_tutor):
        low = await make_tutor(rating_average=3.0, rating_total=2)
        high = await make_tutor(rating_average=4.8, rating_total=10)
        unrated = await make_tutor()

        results = await self.service.search_tutors(db_session)
        assert [t.id for t in results] == [high.id, low.id, unrated.id]

    @pytest.mark.asyncio
    async def test_subject_and_location(self, db_session, make_tutor):
        maths = await make_tutor(subjects=["Math"], locations=["Pune"])
        await make_tutor(subjects=["Chemistry"], locations=["Pune"])
        await make_tutor(subjects=["Math"], locations=["Mumbai"])

        results = await self.service.search_tutors(db_session, subject="math", location="PUNE")
        assert [t.id for t in results] == [maths.id]

    @pytest.mark.asyncio
    async def test_subject_must_match_whole_entry(self, db_session, make_tutor):
        await make_tutor(subjects=["Mathematics"])
        assert await self.service.search_tutors(db_session, subject="Math") == []

    @pytest.mark.asyncio
    async def test_price_bounds_inclusive(self, db_session, make_tutor):
        cheap = await make_tutor(price=300)
        mid = await make_tutor(price=500)
        await make_tutor(price=900)

        results = await self.service.search_tutors(db_session, min_price=300, max_price=500)
        assert {t.id for t in results} == {cheap.id, mid.id}

    @pytest.mark.asyncio
    async def test_min_rating(self, db_session, make_tutor):
        good = await make_tutor(rating_average=4.5, rating_total=4)
        await make_tutor(rating_average=3.9, rating_total=4)

        results = await self.service.search_tutors(db_session, min_rating=4)
        assert [t.id for t in results] == [good.id]

    @pytest.mark.asyncio
    async def test_public_view_hides_credentials(self, db_session, make_tutor):
        await make_tutor(phone="555-0100")
        result = (await self.service.search_tutors(db_session))[0]
        dumped = result.model_dump()
        assert "email" not in dumped
        assert "password_hash" not in dumped
        assert result.contact.phone == "555-0100"


class TestRecommended:

    def setup_method(self):
        self.service = TutorService()

    @pytest.mark.asyncio
    async def test_verified_only(self, db_session, make_tutor):
        verified = await make_tutor(is_verified=True, rating_average=4.0, rating_total=1)
        await make_tutor(is_verified=False, rating_average=5.0, rating_total=3)

        results = await self.service.recommended_tutors(db_session)
        assert [t.id for t in results] == [verified.id]

    @pytest.mark.asyncio
    async def test_limit(self, db_session, make_tutor):
        for _ in range(3):
            await make_tutor(is_verified=True)
        assert len(await self.service.recommended_tutors(db_session, limit=2)) == 2


class TestProfile:

    def setup_method(self):
        self.service = TutorService()

    @pytest.mark.asyncio
    async def test_get_tutor_missing(self, db_session):
        with pytest.raises(NotFoundError, match="Tutor not found"):
            await self.service.get_tutor(db_session, uuid.uuid4())

    @pytest.mark.asyncio
    async def test_profile_lists_bookings(self, db_session, make_student, make_tutor, make_booking):
        tutor = await make_tutor()
        student = await make_student(name="Meera")
        older = await make_booking(student, tutor, booking_date=MONDAY)
        newer = await make_booking(student, tutor, booking_date=MONDAY.replace(day=22))

        profile = await self.service.get_profile(db_session, tutor_principal(tutor))

        assert profile.email == tutor.email
        assert [b.id for b in profile.bookings] == [newer.id, older.id]
        assert profile.bookings[0].student_name == "Meera"

    @pytest.mark.asyncio
    async def test_partial_update(self, db_session, make_tutor):
        tutor = await make_tutor(about="Old bio")
        payload = TutorUpdate(price=650, subjects=["Math", "Statistics"])

        profile = await self.service.update_profile(db_session, tutor_principal(tutor), payload)

        assert profile.price == 650
        assert profile.subjects == ["Math", "Statistics"]
        assert profile.about == "Old bio"
        assert profile.locations == ["Online", "Pune"]

    @pytest.mark.asyncio
    async def test_clear_contact_field(self, db_session, make_tutor):
        tutor = await make_tutor(zoom="https://zoom.example/abc", phone="555-0100")
        payload = TutorUpdate.model_validate({"zoom": None})

        profile = await self.service.update_profile(db_session, tutor_principal(tutor), payload)

        assert profile.contact.zoom is None
        assert profile.contact.phone == "555-0100"

    @pytest.mark.asyncio
    async def test_null_price_ignored(self, db_session, make_tutor):
        tutor = await make_tutor(price=400)
        payload = TutorUpdate.model_validate({"price": None})
        profile = await self.service.update_profile(db_session, tutor_principal(tutor), payload)
        assert profile.price == 400

    @pytest.mark.asyncio
    async def test_availability_replaced_and_normalized(self, db_session, make_tutor):
        tutor = await make_tutor()
        payload = TutorUpdate.model_validate({
            "availability": [
                {"day": "Friday", "slots": [{"startTime": "16:00", "endTime": "17:00"}]},
                {"day": "Tuesday", "slots": [
                    {"startTime": "11:00", "endTime": "12:00"},
                    {"startTime": "08:00", "endTime": "09:00"},
                ]},
            ]
        })

        profile = await self.service.update_profile(db_session, tutor_principal(tutor), payload)

        assert [day.day for day in profile.availability] == ["Tuesday", "Friday"]
        assert [s.start_time for s in profile.availability[0].slots] == ["08:00", "11:00"]

    @pytest.mark.asyncio
    async def test_empty_availability_rejected(self, db_session, make_tutor):
        tutor = await make_tutor()
        payload = TutorUpdate.model_validate({"availability": []})
        with pytest.raises(ValidationError, match="At least one availability slot"):
            await self.service.update_profile(db_session, tutor_principal(tutor), payload)
