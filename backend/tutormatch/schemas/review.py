"""TutorMatch Backend — Review Schemas."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ReviewCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    tutor_id: uuid.UUID = Field(alias="tutorId")
    rating: int = Field(ge=1, le=5)
    comment: Optional[str] = Field(default=None, max_length=2000)


class ReviewResponse(BaseModel):
    id: uuid.UUID
    student_id: uuid.UUID
    tutor_id: uuid.UUID
    rating: int
    comment: Optional[str] = None
    created_at: datetime
    student_name: Optional[str] = None
