"""
TutorMatch Backend — Booking Route Handlers
=============================================

What:  Create, list, view, change status of and delete bookings.

Access:
    POST   /api/bookings              student
    GET    /api/bookings/student      student (own bookings)
    GET    /api/bookings/tutor        tutor (own bookings)
    GET    /api/bookings/{id}         the booking's student or tutor, or an admin
    PATCH  /api/bookings/{id}         the booking's student or tutor
    DELETE /api/bookings/{id}         admin

Status codes for PATCH follow the lifecycle rules: 401 for the wrong party
or a target outside the caller's role, 409 for a terminal booking or an
unreachable target.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from tutormatch.database import get_db_session
from tutormatch.dependencies import (
    get_current_principal,
    require_admin,
    require_student,
    require_tutor,
)
from tutormatch.schemas.booking import BookingCreate, BookingResponse, BookingStatusUpdate
from tutormatch.schemas.common import ErrorResponse, MessageResponse
from tutormatch.security import Principal
from tutormatch.services.booking_service import booking_service

router = APIRouter(prefix="/api/bookings", tags=["Bookings"])


@router.post(
    "",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"description": "Tutor not found", "model": ErrorResponse},
        409: {"description": "Slot unavailable or already booked", "model": ErrorResponse},
    },
    summary="Book a tutor slot",
    description=(
        "Books one of the tutor's declared weekly slots on a calendar date. "
        "startTime/endTime must equal a declared slot exactly, and the slot "
        "must not already hold a pending or confirmed booking."
    ),
)
async def create_booking(
    payload: BookingCreate,
    principal: Principal = Depends(require_student),
    db: AsyncSession = Depends(get_db_session),
) -> BookingResponse:
    return await booking_service.create_booking(db, principal, payload)


@router.get(
    "/student",
    response_model=List[BookingResponse],
    summary="The logged-in student's bookings, newest date first",
)
async def list_student_bookings(
    principal: Principal = Depends(require_student),
    db: AsyncSession = Depends(get_db_session),
) -> List[BookingResponse]:
    return await booking_service.list_student_bookings(db, principal)


@router.get(
    "/tutor",
    response_model=List[BookingResponse],
    summary="The logged-in tutor's bookings, newest date first",
)
async def list_tutor_bookings(
    principal: Principal = Depends(require_tutor),
    db: AsyncSession = Depends(get_db_session),
) -> List[BookingResponse]:
    return await booking_service.list_tutor_bookings(db, principal)


@router.get(
    "/{booking_id}",
    response_model=BookingResponse,
    responses={
        401: {"description": "Not a party to the booking", "model": ErrorResponse},
        404: {"description": "Booking not found", "model": ErrorResponse},
    },
    summary="Booking detail",
)
async def get_booking(
    booking_id: UUID,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> BookingResponse:
    return await booking_service.get_booking(db, principal, booking_id)


@router.patch(
    "/{booking_id}",
    response_model=BookingResponse,
    responses={
        401: {"description": "Not allowed for this caller", "model": ErrorResponse},
        404: {"description": "Booking not found", "model": ErrorResponse},
        409: {"description": "Illegal status change", "model": ErrorResponse},
    },
    summary="Change a booking's status",
)
async def update_booking_status(
    booking_id: UUID,
    payload: BookingStatusUpdate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> BookingResponse:
    return await booking_service.update_status(db, principal, booking_id, payload.status)


@router.delete(
    "/{booking_id}",
    response_model=MessageResponse,
    responses={
        403: {"description": "Admin access required", "model": ErrorResponse},
        404: {"description": "Booking not found", "model": ErrorResponse},
    },
    summary="Delete a booking (admin)",
)
async def delete_booking(
    booking_id: UUID,
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await booking_service.delete_booking(db, booking_id)
    return MessageResponse(message="Booking deleted")
