"""
TutorMatch Backend — Admin Service
====================================

What:  Tutor moderation for admins: paginated listing and verification.
Who:   Called by routes/admin.py behind require_admin.

Pagination is offset-based (page/limit) because the admin UI renders page
numbers; `pages` is ceil(total / limit).
"""

import logging
import math
import uuid
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tutormatch.exceptions import NotFoundError
from tutormatch.models import Tutor
from tutormatch.schemas.admin import TutorPage, TutorVerifyResponse
from tutormatch.security import Principal
from tutormatch.services.tutor_service import tutor_to_public

logger = logging.getLogger(__name__)


class AdminService:

    async def list_tutors(
        self,
        db: AsyncSession,
        is_verified: Optional[bool] = None,
        page: int = 1,
        limit: int = 10,
    ) -> TutorPage:
        query = select(Tutor)
        count_query = select(func.count(Tutor.id))
        if is_verified is not None:
            query = query.where(Tutor.is_verified.is_(is_verified))
            count_query = count_query.where(Tutor.is_verified.is_(is_verified))

        total = (await db.execute(count_query)).scalar() or 0
        result = await db.execute(
            query.order_by(Tutor.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        tutors = [tutor_to_public(tutor) for tutor in result.scalars().all()]

        return TutorPage(
            count=len(tutors),
            total=total,
            page=page,
            pages=math.ceil(total / limit) if total else 0,
            data=tutors,
        )

    async def verify_tutor(
        self, db: AsyncSession, principal: Principal, tutor_id: uuid.UUID
    ) -> TutorVerifyResponse:
        """Mark a tutor as verified. Verifying twice is harmless."""
        tutor = await db.get(Tutor, tutor_id)
        if tutor is None:
            raise NotFoundError(resource="tutor", resource_id=str(tutor_id))

        if not tutor.is_verified:
            tutor.is_verified = True
            await db.flush()
            logger.info("Tutor %s verified by admin %s", tutor.id, principal.id)

        return TutorVerifyResponse(data=tutor_to_public(tutor))


admin_service = AdminService()
