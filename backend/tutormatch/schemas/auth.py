"""
TutorMatch Backend — Auth Schemas
===================================

Signup and login payloads for students, tutors and admins, and the token
response shared by all of them.
"""

import uuid
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from tutormatch.schemas.common import EMAIL_PATTERN
from tutormatch.schemas.tutor import AvailabilityDay


class StudentSignup(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    username: str = Field(min_length=3, max_length=80)
    email: str = Field(pattern=EMAIL_PATTERN, max_length=255)
    password: str = Field(min_length=6, max_length=128)
    phone: Optional[str] = Field(default=None, max_length=32)


class TutorSignup(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    username: str = Field(min_length=3, max_length=80)
    email: str = Field(pattern=EMAIL_PATTERN, max_length=255)
    password: str = Field(min_length=6, max_length=128)
    profession: Optional[str] = Field(default=None, max_length=120)
    about: Optional[str] = Field(default=None, max_length=5000)
    price: float = Field(ge=0, description="Hourly price")
    subjects: List[str] = Field(min_length=1)
    locations: List[str] = Field(min_length=1)
    # Emptiness and slot shape are checked by services.availability so the
    # client gets the business-rule message rather than a generic 422
    availability: List[AvailabilityDay] = Field(default_factory=list)


class LoginRequest(BaseModel):
    """Log in with either email or username."""
    email: Optional[str] = None
    username: Optional[str] = None
    password: str = Field(min_length=1)

    @model_validator(mode="after")
    def require_identifier(self) -> "LoginRequest":
        if not self.email and not self.username:
            raise ValueError("Either email or username is required")
        return self


class AdminLoginRequest(BaseModel):
    email: str
    password: str = Field(min_length=1)


class AuthResponse(BaseModel):
    id: uuid.UUID
    name: str
    email: str
    role: str
    token: str
    is_verified: Optional[bool] = Field(default=None, description="Tutors only")
