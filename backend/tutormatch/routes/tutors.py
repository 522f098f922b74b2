"""
TutorMatch Backend — Tutor Route Handlers
===========================================

What:  Public search/recommendations/detail and the tutor's own profile.

Route order matters: /api/tutors/recommended and /api/tutors/me are declared
before /api/tutors/{tutor_id} so the literal segments are not parsed as ids.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from tutormatch.database import get_db_session
from tutormatch.dependencies import require_tutor
from tutormatch.schemas.common import ErrorResponse
from tutormatch.schemas.tutor import TutorProfile, TutorPublic, TutorUpdate
from tutormatch.security import Principal
from tutormatch.services.tutor_service import tutor_service

router = APIRouter(prefix="/api/tutors", tags=["Tutors"])


@router.get(
    "",
    response_model=List[TutorPublic],
    summary="Search tutors",
    description=(
        "Filters by subject, location, hourly price range and minimum rating. "
        "Results are sorted by average rating, best first."
    ),
)
async def search_tutors(
    subject: str | None = Query(default=None, description="Subject taught"),
    location: str | None = Query(default=None, description="Teaching location"),
    min_price: float | None = Query(default=None, ge=0),
    max_price: float | None = Query(default=None, ge=0),
    rating: float | None = Query(default=None, ge=0, le=5, description="Minimum average rating"),
    db: AsyncSession = Depends(get_db_session),
) -> List[TutorPublic]:
    return await tutor_service.search_tutors(
        db,
        subject=subject,
        location=location,
        min_price=min_price,
        max_price=max_price,
        min_rating=rating,
    )


@router.get(
    "/recommended",
    response_model=List[TutorPublic],
    summary="Top-rated verified tutors",
)
async def recommended_tutors(
    limit: int = Query(default=10, ge=1, le=50),
    db: AsyncSession = Depends(get_db_session),
) -> List[TutorPublic]:
    return await tutor_service.recommended_tutors(db, limit=limit)


@router.get(
    "/me",
    response_model=TutorProfile,
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
    summary="The logged-in tutor's profile",
)
async def get_my_profile(
    principal: Principal = Depends(require_tutor),
    db: AsyncSession = Depends(get_db_session),
) -> TutorProfile:
    return await tutor_service.get_profile(db, principal)


@router.patch(
    "/me",
    response_model=TutorProfile,
    responses={
        400: {"description": "Invalid availability", "model": ErrorResponse},
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
    },
    summary="Update the logged-in tutor's profile",
)
async def update_my_profile(
    payload: TutorUpdate,
    principal: Principal = Depends(require_tutor),
    db: AsyncSession = Depends(get_db_session),
) -> TutorProfile:
    return await tutor_service.update_profile(db, principal, payload)


@router.get(
    "/{tutor_id}",
    response_model=TutorPublic,
    responses={404: {"description": "Tutor not found", "model": ErrorResponse}},
    summary="Public tutor detail",
)
async def get_tutor(
    tutor_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> TutorPublic:
    return await tutor_service.get_tutor(db, tutor_id)
