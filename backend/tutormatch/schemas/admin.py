"""TutorMatch Backend — Admin Schemas (offset-paginated tutor listing)."""

from typing import List

from pydantic import BaseModel

from tutormatch.schemas.tutor import TutorPublic


class TutorPage(BaseModel):
    success: bool = True
    count: int
    total: int
    page: int
    pages: int
    data: List[TutorPublic]


class TutorVerifyResponse(BaseModel):
    success: bool = True
    data: TutorPublic
