"""
TutorMatch Backend — Review Service Tests
===========================================

What we test:
    ✅ Ratings [4, 5, 3] → 4.0 over 3; deleting the 3 → 4.5 over 2
    ✅ Deleting every review resets the summary to 0 / 0
    ✅ One review per (student, tutor) pair
    ✅ Completed-session rule when enabled in settings
    ✅ Only the author or an admin may delete
    ✅ Listing: newest first, reviewer names attached
"""

import uuid
from unittest.mock import patch

import pytest

from conftest import admin_principal, student_principal
from tutormatch.config import settings
from tutormatch.exceptions import ConflictError, ForbiddenError, NotFoundError
from tutormatch.models import Tutor
from tutormatch.schemas.review import ReviewCreate
from tutormatch.services.review_service import ReviewService


def review_request(tutor, rating, comment=None):
    return ReviewCreate(tutorId=tutor.id, rating=rating, comment=comment)


class TestReviewRatings:

    def setup_method(self):
        self.service = ReviewService()

    async def _rating(self, db_session, tutor_id):
        tutor = await db_session.get(Tutor, tutor_id, populate_existing=True)
        return tutor.rating_average, tutor.rating_total

    async def _review_many(self, db_session, make_student, tutor, ratings):
        created = []
        for rating in ratings:
            student = await make_student()
            review = await self.service.create_review(
                db_session, student_principal(student), review_request(tutor, rating)
            )
            await db_session.commit()
            created.append((student, review))
        return created

    @pytest.mark.asyncio
    async def test_summary_tracks_creates_and_deletes(self, db_session, make_student, make_tutor):
        tutor = await make_tutor()
        created = await self._review_many(db_session, make_student, tutor, [4, 5, 3])

        average, total = await self._rating(db_session, tutor.id)
        assert average == pytest.approx(4.0)
        assert total == 3

        author, lowest = created[2]
        await self.service.delete_review(db_session, student_principal(author), lowest.id)
        await db_session.commit()

        average, total = await self._rating(db_session, tutor.id)
        assert average == pytest.approx(4.5)
        assert total == 2

    @pytest.mark.asyncio
    async def test_deleting_all_resets_summary(
        self, db_session, make_student, make_tutor, make_admin
    ):
        tutor = await make_tutor()
        admin = await make_admin()
        created = await self._review_many(db_session, make_student, tutor, [2, 5])

        for _, review in created:
            await self.service.delete_review(db_session, admin_principal(admin), review.id)
        await db_session.commit()

        assert await self._rating(db_session, tutor.id) == (0.0, 0)

    @pytest.mark.asyncio
    async def test_response_carries_reviewer(self, db_session, make_student, make_tutor):
        student, tutor = await make_student(), await make_tutor()
        review = await self.service.create_review(
            db_session, student_principal(student), review_request(tutor, 5, "Clear explanations")
        )
        assert review.student_id == student.id
        assert review.tutor_id == tutor.id
        assert review.comment == "Clear explanations"
        assert review.student_name == student.name


class TestReviewEligibility:

    def setup_method(self):
        self.service = ReviewService()

    @pytest.mark.asyncio
    async def test_duplicate_review_conflicts(self, db_session, make_student, make_tutor):
        student, tutor = await make_student(), await make_tutor()
        await self.service.create_review(
            db_session, student_principal(student), review_request(tutor, 4)
        )
        await db_session.commit()

        with pytest.raises(ConflictError, match="You already reviewed this tutor"):
            await self.service.create_review(
                db_session, student_principal(student), review_request(tutor, 1)
            )

    @pytest.mark.asyncio
    async def test_same_student_may_review_other_tutors(self, db_session, make_student, make_tutor):
        student = await make_student()
        first, second = await make_tutor(), await make_tutor()
        await self.service.create_review(db_session, student_principal(student), review_request(first, 4))
        await self.service.create_review(db_session, student_principal(student), review_request(second, 2))
        await db_session.commit()

        assert (await db_session.get(Tutor, second.id, populate_existing=True)).rating_total == 1

    @pytest.mark.asyncio
    async def test_unknown_tutor(self, db_session, make_student):
        student = await make_student()
        with pytest.raises(NotFoundError, match="Tutor not found"):
            await self.service.create_review(
                db_session, student_principal(student), review_request(Tutor(id=uuid.uuid4()), 5)
            )

    @pytest.mark.asyncio
    async def test_completed_session_rule(
        self, db_session, make_student, make_tutor, make_booking
    ):
        student, tutor = await make_student(), await make_tutor()
        await make_booking(student, tutor, status="confirmed")

        with patch.object(settings, "require_completed_booking_for_review", True):
            with pytest.raises(ForbiddenError, match="after a completed session"):
                await self.service.create_review(
                    db_session, student_principal(student), review_request(tutor, 5)
                )

            await make_booking(student, tutor, status="completed", start_time="14:00", end_time="15:30")
            review = await self.service.create_review(
                db_session, student_principal(student), review_request(tutor, 5)
            )

        assert review.rating == 5

    @pytest.mark.asyncio
    async def test_rule_off_by_default(self, db_session, make_student, make_tutor):
        student, tutor = await make_student(), await make_tutor()
        assert settings.require_completed_booking_for_review is False
        review = await self.service.create_review(
            db_session, student_principal(student), review_request(tutor, 3)
        )
        assert review.rating == 3


class TestReviewDeletion:

    def setup_method(self):
        self.service = ReviewService()

    @pytest.mark.asyncio
    async def test_non_author_forbidden(self, db_session, make_student, make_tutor):
        author, other, tutor = await make_student(), await make_student(), await make_tutor()
        review = await self.service.create_review(
            db_session, student_principal(author), review_request(tutor, 4)
        )
        await db_session.commit()

        with pytest.raises(ForbiddenError, match="Not authorized to delete this review"):
            await self.service.delete_review(db_session, student_principal(other), review.id)

    @pytest.mark.asyncio
    async def test_missing_review(self, db_session, make_admin):
        admin = await make_admin()
        with pytest.raises(NotFoundError, match="Review not found"):
            await self.service.delete_review(db_session, admin_principal(admin), uuid.uuid4())


class TestListReviews:

    def setup_method(self):
        self.service = ReviewService()

    @pytest.mark.asyncio
    async def test_lists_with_names(self, db_session, make_student, make_tutor):
        tutor = await make_tutor()
        alice = await make_student(name="Alice")
        bob = await make_student(name="Bob")
        await self.service.create_review(db_session, student_principal(alice), review_request(tutor, 5))
        await self.service.create_review(db_session, student_principal(bob), review_request(tutor, 3))
        await db_session.commit()

        reviews = await self.service.list_tutor_reviews(db_session, tutor.id)

        assert {r.student_name for r in reviews} == {"Alice", "Bob"}
        assert [r.created_at for r in reviews] == sorted(
            (r.created_at for r in reviews), reverse=True
        )

    @pytest.mark.asyncio
    async def test_unknown_tutor(self, db_session):
        with pytest.raises(NotFoundError):
            await self.service.list_tutor_reviews(db_session, uuid.uuid4())

    @pytest.mark.asyncio
    async def test_empty(self, db_session, make_tutor):
        tutor = await make_tutor()
        assert await self.service.list_tutor_reviews(db_session, tutor.id) == []
