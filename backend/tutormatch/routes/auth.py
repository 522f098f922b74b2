"""
TutorMatch Backend — Auth Route Handlers
==========================================

What:  Signup and login for students and tutors, admin login, logout.
How:   Thin handlers over AuthService. All responses carry a bearer token
       the client sends back as `Authorization: Bearer <token>`.

These paths share the stricter auth rate-limit bucket (see
middleware/rate_limit.py).
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from tutormatch.database import get_db_session
from tutormatch.schemas.auth import (
    AdminLoginRequest,
    AuthResponse,
    LoginRequest,
    StudentSignup,
    TutorSignup,
)
from tutormatch.schemas.common import ErrorResponse, MessageResponse
from tutormatch.security import STUDENT, TUTOR
from tutormatch.services.auth_service import auth_service

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/student/signup",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"description": "Username or email taken", "model": ErrorResponse}},
    summary="Create a student account",
)
async def student_signup(
    payload: StudentSignup,
    db: AsyncSession = Depends(get_db_session),
) -> AuthResponse:
    return await auth_service.signup_student(db, payload)


@router.post(
    "/student/login",
    response_model=AuthResponse,
    responses={401: {"description": "Invalid credentials", "model": ErrorResponse}},
    summary="Log in as a student",
)
async def student_login(
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> AuthResponse:
    return await auth_service.login(db, STUDENT, payload)


@router.post(
    "/tutor/signup",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Invalid availability", "model": ErrorResponse},
        409: {"description": "Username or email taken", "model": ErrorResponse},
    },
    summary="Create a tutor account",
    description=(
        "Creates a tutor with a weekly availability. At least one weekday with "
        "one slot is required; slots on a day must not overlap."
    ),
)
async def tutor_signup(
    payload: TutorSignup,
    db: AsyncSession = Depends(get_db_session),
) -> AuthResponse:
    return await auth_service.signup_tutor(db, payload)


@router.post(
    "/tutor/login",
    response_model=AuthResponse,
    responses={401: {"description": "Invalid credentials", "model": ErrorResponse}},
    summary="Log in as a tutor",
)
async def tutor_login(
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> AuthResponse:
    return await auth_service.login(db, TUTOR, payload)


@router.post(
    "/admin/login",
    response_model=AuthResponse,
    responses={401: {"description": "Invalid credentials", "model": ErrorResponse}},
    summary="Log in as an admin",
)
async def admin_login(
    payload: AdminLoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> AuthResponse:
    return await auth_service.login_admin(db, payload)


@router.post("/logout", response_model=MessageResponse, summary="Log out")
async def logout() -> MessageResponse:
    """
    Tokens are stateless; the client discards its token. Kept so clients
    have a uniform endpoint to call.
    """
    return MessageResponse(message="Logged out successfully")
