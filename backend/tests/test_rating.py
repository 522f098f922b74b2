"""
TutorMatch Backend — Rating Aggregator Tests
==============================================

What we test:
    ✅ summarize(): mean and count, zero for no reviews, no rounding
    ✅ recompute(): writes the summary back to the tutor row
    ✅ recompute() is idempotent
"""

import pytest

from tutormatch.models import Review, Tutor
from tutormatch.services.rating import RatingSummary, rating_aggregator, summarize


class TestSummarize:

    def test_mean_and_count(self):
        assert summarize([4, 5, 3]) == RatingSummary(average=4.0, total=3)

    def test_empty(self):
        assert summarize([]) == RatingSummary(average=0.0, total=0)

    def test_not_rounded(self):
        summary = summarize([5, 4, 4])
        assert summary.average == pytest.approx(13 / 3)
        assert summary.total == 3

    def test_accepts_generators(self):
        assert summarize(r for r in [2, 4]).average == 3.0


class TestRecompute:

    async def _add_reviews(self, db_session, make_student, tutor, ratings):
        reviews = []
        for rating in ratings:
            student = await make_student()
            review = Review(student_id=student.id, tutor_id=tutor.id, rating=rating)
            db_session.add(review)
            reviews.append(review)
        await db_session.commit()
        return reviews

    async def _stored(self, db_session, tutor_id):
        tutor = await db_session.get(Tutor, tutor_id, populate_existing=True)
        return tutor.rating_average, tutor.rating_total

    @pytest.mark.asyncio
    async def test_writes_summary(self, db_session, make_student, make_tutor):
        tutor = await make_tutor()
        await self._add_reviews(db_session, make_student, tutor, [4, 5, 3])

        summary = await rating_aggregator.recompute(db_session, tutor.id)
        await db_session.commit()

        assert summary == RatingSummary(average=4.0, total=3)
        assert await self._stored(db_session, tutor.id) == (4.0, 3)

    @pytest.mark.asyncio
    async def test_idempotent(self, db_session, make_student, make_tutor):
        tutor = await make_tutor()
        await self._add_reviews(db_session, make_student, tutor, [5, 2])

        first = await rating_aggregator.recompute(db_session, tutor.id)
        second = await rating_aggregator.recompute(db_session, tutor.id)
        await db_session.commit()

        assert first == second == RatingSummary(average=3.5, total=2)

    @pytest.mark.asyncio
    async def test_only_counts_own_reviews(self, db_session, make_student, make_tutor):
        tutor = await make_tutor()
        other = await make_tutor()
        await self._add_reviews(db_session, make_student, tutor, [5])
        await self._add_reviews(db_session, make_student, other, [1, 1])

        summary = await rating_aggregator.recompute(db_session, tutor.id)
        assert summary == RatingSummary(average=5.0, total=1)

    @pytest.mark.asyncio
    async def test_no_reviews_resets_to_zero(self, db_session, make_tutor):
        tutor = await make_tutor(rating_average=4.2, rating_total=9)

        summary = await rating_aggregator.recompute(db_session, tutor.id)
        await db_session.commit()

        assert summary == RatingSummary(average=0.0, total=0)
        assert await self._stored(db_session, tutor.id) == (0.0, 0)
