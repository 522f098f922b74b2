"""
TutorMatch Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets a fresh in-memory SQLite database (aiosqlite) with all
       tables created from the ORM metadata. API tests talk to a fresh app
       through httpx's ASGITransport with get_db_session overridden to use
       that same database.

Fixture Hierarchy (all function-scoped):
    ├── engine: in-memory SQLite engine, tables created
    │   ├── db_session: AsyncSession for arranging data and service calls
    │   └── client: httpx AsyncClient wired to create_app()
    ├── make_student / make_tutor / make_admin / make_booking: row factories
    ├── auth_headers: bearer header for any principal
    └── mock_db_session: AsyncMock session for pure mock-based tests

SQLite notes:
    - StaticPool keeps the single in-memory connection alive and shared.
    - SELECT ... FOR UPDATE is compiled away; SQLite serializes writers itself.
    - The partial unique index on active bookings is created with sqlite_where.
"""

import os
from datetime import date
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

# Override settings for testing BEFORE any tutormatch imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET"] = "test-secret-not-for-production"
os.environ["PAYMENT_WEBHOOK_SECRET"] = "whsec_test"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RATE_LIMIT_REQUESTS"] = "10000"
os.environ["AUTH_RATE_LIMIT_REQUESTS"] = "1000"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from tutormatch.database import Base, get_db_session
from tutormatch.models import Admin, Booking, Student, Tutor
from tutormatch.security import ADMIN, STUDENT, TUTOR, Principal, create_access_token, hash_password

# 2024-01-15 is a Monday; 2024-01-16 a Tuesday
MONDAY = date(2024, 1, 15)
TUESDAY = date(2024, 1, 16)
TEST_PASSWORD = "secret123"

DEFAULT_AVAILABILITY: List[Dict[str, Any]] = [
    {
        "day": "Monday",
        "slots": [
            {"startTime": "09:00", "endTime": "10:00"},
            {"startTime": "14:00", "endTime": "15:30"},
        ],
    },
    {"day": "Thursday", "slots": [{"startTime": "18:00", "endTime": "19:00"}]},
]

# Hashing once keeps factories fast; argon2 is deliberately slow
_PASSWORD_HASH = hash_password(TEST_PASSWORD)


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def engine():
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    """
    HTTPX AsyncClient for a fresh app whose requests use the test database.

    Usage:
        async def test_health(client):
            response = await client.get("/health")
    """
    from tutormatch.main import create_app

    app = create_app()

    async def _test_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = _test_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as test_client:
        yield test_client


# ══════════════════════════════════════════════════════════════════════════
# Factories
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def make_student(db_session):
    counter = {"n": 0}

    async def _make(**overrides) -> Student:
        counter["n"] += 1
        n = counter["n"]
        fields = {
            "name": f"Student {n}",
            "username": f"student{n}",
            "email": f"student{n}@example.com",
            "password_hash": _PASSWORD_HASH,
        }
        fields.update(overrides)
        student = Student(**fields)
        db_session.add(student)
        await db_session.commit()
        return student

    return _make


@pytest.fixture
def make_tutor(db_session):
    counter = {"n": 0}

    async def _make(**overrides) -> Tutor:
        counter["n"] += 1
        n = counter["n"]
        fields = {
            "name": f"Tutor {n}",
            "username": f"tutor{n}",
            "email": f"tutor{n}@example.com",
            "password_hash": _PASSWORD_HASH,
            "profession": "Mathematician",
            "price": 500.0,
            "subjects": ["Math", "Physics"],
            "locations": ["Online", "Pune"],
            "availability": [dict(day) for day in DEFAULT_AVAILABILITY],
        }
        fields.update(overrides)
        tutor = Tutor(**fields)
        db_session.add(tutor)
        await db_session.commit()
        return tutor

    return _make


@pytest.fixture
def make_admin(db_session):
    async def _make(email: str = "admin@example.com") -> Admin:
        admin = Admin(name="Admin", email=email, password_hash=_PASSWORD_HASH)
        db_session.add(admin)
        await db_session.commit()
        return admin

    return _make


@pytest.fixture
def make_booking(db_session):
    """Insert a booking row directly, bypassing the conflict checker."""

    async def _make(
        student: Student,
        tutor: Tutor,
        booking_date: date = MONDAY,
        start_time: str = "09:00",
        end_time: str = "10:00",
        status: str = "pending",
        payment_status: str = "pending",
        transaction_id: Optional[str] = None,
    ) -> Booking:
        booking = Booking(
            student_id=student.id,
            tutor_id=tutor.id,
            subject="Math",
            date=booking_date,
            start_time=start_time,
            end_time=end_time,
            status=status,
            payment_status=payment_status,
            transaction_id=transaction_id,
        )
        db_session.add(booking)
        await db_session.commit()
        return booking

    return _make


# ══════════════════════════════════════════════════════════════════════════
# Principals & auth
# ══════════════════════════════════════════════════════════════════════════

def principal_for(account, role: str) -> Principal:
    return Principal(id=account.id, role=role, name=account.name)


def student_principal(student: Student) -> Principal:
    return principal_for(student, STUDENT)


def tutor_principal(tutor: Tutor) -> Principal:
    return principal_for(tutor, TUTOR)


def admin_principal(admin: Admin) -> Principal:
    return principal_for(admin, ADMIN)


@pytest.fixture
def auth_headers():
    """
    Build an Authorization header for an account.

    Usage:
        headers = auth_headers(student, "student")
    """

    def _headers(account, role: str) -> Dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(account.id, role)}"}

    return _headers


# ══════════════════════════════════════════════════════════════════════════
# Mocks
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        result = MagicMock()
        result.scalar_one_or_none.return_value = tutor
        mock_db_session.execute.return_value = result
        await booking_service.create_booking(mock_db_session, principal, payload)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.get = AsyncMock()
    session.add = MagicMock()
    return session
