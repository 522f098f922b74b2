"""
TutorMatch Backend — Pydantic Request/Response Schemas
=======================================================

Schemas are separate from SQLAlchemy models so the API contract can differ
from the table layout (password hashes never leave the service layer, the
rating summary is nested, parties are embedded on booking lists).
"""
