"""
TutorMatch Backend — Application Package Initializer
=====================================================

What: Marks the `tutormatch` directory as a Python package.
Who:  Used by uvicorn (tutormatch.main:app), Alembic and pytest.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Bookings, ratings, auth rules
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    The interesting rules (slot availability, booking lifecycle, rating
    aggregation) live in services/ as plain functions and classes so they
    can be tested without HTTP.
"""

__version__ = "1.0.0"
