"""
TutorMatch Backend — Tutor Schemas
====================================

What:  API contracts for tutor profiles, search results and availability.

Availability wire format:
    [
        {"day": "Monday", "slots": [{"startTime": "09:00", "endTime": "10:00"}]},
        {"day": "Wednesday", "slots": [...]}
    ]
    The camelCase slot keys are also the stored JSON shape, so a validated
    AvailabilityDay dumps straight into Tutor.availability with by_alias=True.
"""

import uuid
from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from tutormatch.schemas.common import TIME_PATTERN

Weekday = Literal[
    "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"
]


class TimeSlot(BaseModel):
    """One declared open interval [startTime, endTime) on a weekday."""
    model_config = ConfigDict(populate_by_name=True)

    start_time: str = Field(alias="startTime", pattern=TIME_PATTERN)
    end_time: str = Field(alias="endTime", pattern=TIME_PATTERN)


class AvailabilityDay(BaseModel):
    day: Weekday
    slots: List[TimeSlot] = Field(default_factory=list)


class RatingSummaryResponse(BaseModel):
    average: float = Field(ge=0, description="Mean review rating, 0 when unrated")
    total: int = Field(ge=0, description="Number of reviews")


class TutorContact(BaseModel):
    phone: Optional[str] = None
    whatsapp: Optional[str] = None
    zoom: Optional[str] = None


class TutorPublic(BaseModel):
    """What anyone may see about a tutor: search results and detail page."""
    id: uuid.UUID
    name: str
    username: str
    profession: Optional[str] = None
    about: Optional[str] = None
    price: float
    subjects: List[str]
    locations: List[str]
    availability: List[AvailabilityDay]
    contact: TutorContact
    rating: RatingSummaryResponse
    is_verified: bool
    created_at: datetime


class TutorBookingSummary(BaseModel):
    id: uuid.UUID
    student_id: uuid.UUID
    student_name: Optional[str] = None
    subject: str
    date: date
    start_time: str
    end_time: str
    status: str
    payment_status: str


class TutorProfile(TutorPublic):
    """The logged-in tutor's own view, with email and bookings."""
    email: str
    bookings: List[TutorBookingSummary] = Field(default_factory=list)


class TutorUpdate(BaseModel):
    """PATCH /api/tutors/me. Only provided fields are changed."""
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    profession: Optional[str] = Field(default=None, max_length=120)
    about: Optional[str] = Field(default=None, max_length=5000)
    price: Optional[float] = Field(default=None, ge=0)
    subjects: Optional[List[str]] = Field(default=None, min_length=1)
    locations: Optional[List[str]] = Field(default=None, min_length=1)
    availability: Optional[List[AvailabilityDay]] = None
    phone: Optional[str] = Field(default=None, max_length=32)
    whatsapp: Optional[str] = Field(default=None, max_length=64)
    zoom: Optional[str] = Field(default=None, max_length=255)
