"""TutorMatch Backend — Admin routes (tutor moderation)."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from tutormatch.database import get_db_session
from tutormatch.dependencies import require_admin
from tutormatch.schemas.admin import TutorPage, TutorVerifyResponse
from tutormatch.schemas.common import ErrorResponse
from tutormatch.security import Principal
from tutormatch.services.admin_service import admin_service

router = APIRouter(
    prefix="/api/admin",
    tags=["Admin"],
    responses={
        401: {"model": ErrorResponse},
        403: {"description": "Admin access required", "model": ErrorResponse},
    },
)


@router.get("/tutors", response_model=TutorPage, summary="List tutors, paginated")
async def list_tutors(
    is_verified: bool | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> TutorPage:
    return await admin_service.list_tutors(db, is_verified=is_verified, page=page, limit=limit)


@router.patch(
    "/tutors/{tutor_id}/verify",
    response_model=TutorVerifyResponse,
    responses={404: {"description": "Tutor not found", "model": ErrorResponse}},
    summary="Mark a tutor as verified",
)
async def verify_tutor(
    tutor_id: UUID,
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> TutorVerifyResponse:
    return await admin_service.verify_tutor(db, principal, tutor_id)
