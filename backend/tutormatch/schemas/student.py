"""TutorMatch Backend — Student Profile Schemas."""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from tutormatch.schemas.booking import BookingResponse
from tutormatch.schemas.common import EMAIL_PATTERN


class StudentProfile(BaseModel):
    id: uuid.UUID
    name: str
    username: str
    email: str
    phone: str
    created_at: datetime
    bookings: List[BookingResponse] = Field(default_factory=list)


class StudentUpdate(BaseModel):
    """
    PATCH /api/students/me.

    `password` is accepted by the schema only so the service can reject it
    with a clear message instead of silently dropping it.
    """
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    username: Optional[str] = Field(default=None, min_length=3, max_length=80)
    email: Optional[str] = Field(default=None, pattern=EMAIL_PATTERN, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=32)
    password: Optional[str] = None
