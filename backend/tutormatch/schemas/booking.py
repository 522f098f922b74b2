"""
TutorMatch Backend — Booking Schemas
======================================

What:  Request/response contracts for /api/bookings.

Request bodies accept the original clients' camelCase keys
(tutorId, startTime, endTime) as well as snake_case.
"""

import uuid
from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from tutormatch.schemas.common import TIME_PATTERN

BookingStatusLiteral = Literal["pending", "confirmed", "completed", "cancelled"]


class BookingCreate(BaseModel):
    """POST /api/bookings body."""
    model_config = ConfigDict(populate_by_name=True)

    tutor_id: uuid.UUID = Field(alias="tutorId")
    date: date
    start_time: str = Field(alias="startTime", pattern=TIME_PATTERN)
    end_time: str = Field(alias="endTime", pattern=TIME_PATTERN)
    subject: str = Field(min_length=1, max_length=120)
    location: Optional[str] = Field(default=None, max_length=255)

    @model_validator(mode="after")
    def check_window(self) -> "BookingCreate":
        if self.start_time >= self.end_time:
            raise ValueError("startTime must be before endTime")
        return self


class BookingStatusUpdate(BaseModel):
    """PATCH /api/bookings/{id} body."""
    status: BookingStatusLiteral


class PartySummary(BaseModel):
    id: uuid.UUID
    name: str
    email: Optional[str] = None
    profession: Optional[str] = None


class BookingResponse(BaseModel):
    id: uuid.UUID
    student_id: uuid.UUID
    tutor_id: uuid.UUID
    subject: str
    date: date
    start_time: str
    end_time: str
    location: Optional[str] = None
    status: str
    payment_status: str
    transaction_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    # Populated on list/detail endpoints only
    student: Optional[PartySummary] = None
    tutor: Optional[PartySummary] = None
