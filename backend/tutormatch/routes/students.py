"""TutorMatch Backend — Student profile routes (/api/students/me)."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tutormatch.database import get_db_session
from tutormatch.dependencies import require_student
from tutormatch.schemas.common import ErrorResponse
from tutormatch.schemas.student import StudentProfile, StudentUpdate
from tutormatch.security import Principal
from tutormatch.services.student_service import student_service

router = APIRouter(prefix="/api/students", tags=["Students"])


@router.get(
    "/me",
    response_model=StudentProfile,
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
    summary="The logged-in student's profile and bookings",
)
async def get_my_profile(
    principal: Principal = Depends(require_student),
    db: AsyncSession = Depends(get_db_session),
) -> StudentProfile:
    return await student_service.get_profile(db, principal)


@router.patch(
    "/me",
    response_model=StudentProfile,
    responses={
        400: {"description": "Password sent to the profile endpoint", "model": ErrorResponse},
        409: {"description": "Username or email taken", "model": ErrorResponse},
    },
    summary="Update the logged-in student's profile",
)
async def update_my_profile(
    payload: StudentUpdate,
    principal: Principal = Depends(require_student),
    db: AsyncSession = Depends(get_db_session),
) -> StudentProfile:
    return await student_service.update_profile(db, principal, payload)
