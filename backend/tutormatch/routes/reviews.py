"""TutorMatch Backend — Review routes. Every write recomputes the tutor's rating."""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from tutormatch.database import get_db_session
from tutormatch.dependencies import get_current_principal, require_student
from tutormatch.schemas.common import ErrorResponse, MessageResponse
from tutormatch.schemas.review import ReviewCreate, ReviewResponse
from tutormatch.security import Principal
from tutormatch.services.review_service import review_service

router = APIRouter(prefix="/api/reviews", tags=["Reviews"])


@router.post(
    "",
    response_model=ReviewResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"description": "Tutor not found", "model": ErrorResponse},
        409: {"description": "Already reviewed", "model": ErrorResponse},
    },
    summary="Review a tutor",
)
async def create_review(
    payload: ReviewCreate,
    principal: Principal = Depends(require_student),
    db: AsyncSession = Depends(get_db_session),
) -> ReviewResponse:
    return await review_service.create_review(db, principal, payload)


@router.get(
    "/tutor/{tutor_id}",
    response_model=List[ReviewResponse],
    responses={404: {"description": "Tutor not found", "model": ErrorResponse}},
    summary="A tutor's reviews, newest first",
)
async def list_tutor_reviews(
    tutor_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> List[ReviewResponse]:
    return await review_service.list_tutor_reviews(db, tutor_id)


@router.delete(
    "/{review_id}",
    response_model=MessageResponse,
    responses={
        403: {"description": "Not the author", "model": ErrorResponse},
        404: {"description": "Review not found", "model": ErrorResponse},
    },
    summary="Delete a review (author or admin)",
)
async def delete_review(
    review_id: UUID,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await review_service.delete_review(db, principal, review_id)
    return MessageResponse(message="Review deleted")
