"""
TutorMatch Backend — Auth Service
===================================

What:  Student/tutor signup, login for all three roles, and the startup
       admin bootstrap.
Who:   routes/auth.py; ensure_admin() from the app lifespan.

Login accepts either email or username. Every failure (unknown account,
wrong password) produces the same "Invalid credentials" error so the
response does not reveal which accounts exist.
"""

import logging
from typing import Optional, Type, Union

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tutormatch.config import settings
from tutormatch.exceptions import ConflictError, UnauthorizedError
from tutormatch.models import Admin, Student, Tutor
from tutormatch.schemas.auth import (
    AdminLoginRequest,
    AuthResponse,
    LoginRequest,
    StudentSignup,
    TutorSignup,
)
from tutormatch.security import (
    ADMIN,
    STUDENT,
    TUTOR,
    create_access_token,
    hash_password_async,
    verify_password_async,
)
from tutormatch.services.availability import validate_availability

logger = logging.getLogger(__name__)

Account = Union[Student, Tutor]


class AuthService:

    async def _ensure_unique(
        self, db: AsyncSession, model: Type[Account], username: str, email: str
    ) -> None:
        result = await db.execute(
            select(model.id)
            .where(or_(model.username == username, model.email == email))
            .limit(1)
        )
        if result.scalar_one_or_none() is not None:
            raise ConflictError("Username or email already exists")

    async def _insert(self, db: AsyncSession, account) -> None:
        db.add(account)
        try:
            await db.flush()
        except IntegrityError:
            # Lost a race with a concurrent signup for the same identity
            raise ConflictError("Username or email already exists")

    async def signup_student(self, db: AsyncSession, payload: StudentSignup) -> AuthResponse:
        email = payload.email.lower()
        await self._ensure_unique(db, Student, payload.username, email)

        student = Student(
            name=payload.name,
            username=payload.username,
            email=email,
            password_hash=await hash_password_async(payload.password),
        )
        if payload.phone:
            student.phone = payload.phone
        await self._insert(db, student)

        logger.info("Student signed up: %s", student.id)
        return AuthResponse(
            id=student.id,
            name=student.name,
            email=student.email,
            role=STUDENT,
            token=create_access_token(student.id, STUDENT),
        )

    async def signup_tutor(self, db: AsyncSession, payload: TutorSignup) -> AuthResponse:
        """
        Create a tutor account.

        Availability goes through validate_availability() and is stored in
        its normalized form; a tutor must declare at least one slot.

        Raises:
            ValidationError: malformed availability
            ConflictError: username or email already taken
        """
        availability = validate_availability(
            [day.model_dump(by_alias=True) for day in payload.availability]
        )
        email = payload.email.lower()
        await self._ensure_unique(db, Tutor, payload.username, email)

        tutor = Tutor(
            name=payload.name,
            username=payload.username,
            email=email,
            password_hash=await hash_password_async(payload.password),
            profession=payload.profession,
            about=payload.about,
            price=payload.price,
            subjects=list(payload.subjects),
            locations=list(payload.locations),
            availability=availability,
            rating_average=0.0,
            rating_total=0,
            is_verified=False,
        )
        await self._insert(db, tutor)

        logger.info("Tutor signed up: %s (%d available days)", tutor.id, len(availability))
        return AuthResponse(
            id=tutor.id,
            name=tutor.name,
            email=tutor.email,
            role=TUTOR,
            token=create_access_token(tutor.id, TUTOR),
            is_verified=tutor.is_verified,
        )

    async def _find_account(
        self, db: AsyncSession, model: Type[Account], payload: LoginRequest
    ) -> Optional[Account]:
        if payload.email:
            criterion = model.email == payload.email.lower()
        else:
            criterion = model.username == payload.username
        result = await db.execute(select(model).where(criterion))
        return result.scalar_one_or_none()

    async def login(
        self, db: AsyncSession, role: str, payload: LoginRequest
    ) -> AuthResponse:
        """Log a student or tutor in by email or username."""
        model = Student if role == STUDENT else Tutor
        account = await self._find_account(db, model, payload)
        if account is None or not await verify_password_async(
            payload.password, account.password_hash
        ):
            logger.info("Failed %s login", role)
            raise UnauthorizedError("Invalid credentials")

        return AuthResponse(
            id=account.id,
            name=account.name,
            email=account.email,
            role=role,
            token=create_access_token(account.id, role),
            is_verified=account.is_verified if role == TUTOR else None,
        )

    async def login_admin(self, db: AsyncSession, payload: AdminLoginRequest) -> AuthResponse:
        result = await db.execute(select(Admin).where(Admin.email == payload.email.lower()))
        admin = result.scalar_one_or_none()
        if admin is None or not await verify_password_async(
            payload.password, admin.password_hash
        ):
            logger.warning("Failed admin login")
            raise UnauthorizedError("Invalid credentials")

        return AuthResponse(
            id=admin.id,
            name=admin.name,
            email=admin.email,
            role=ADMIN,
            token=create_access_token(admin.id, ADMIN),
        )

    async def ensure_admin(self, db: AsyncSession) -> Optional[Admin]:
        """
        Create the configured admin account if it does not exist yet.

        No-op unless both ADMIN_EMAIL and ADMIN_PASSWORD are set. An existing
        account is left untouched, so a changed ADMIN_PASSWORD does not
        overwrite a password rotated elsewhere.
        """
        if not settings.admin_email or not settings.admin_password:
            return None

        email = settings.admin_email.lower()
        result = await db.execute(select(Admin).where(Admin.email == email))
        admin = result.scalar_one_or_none()
        if admin is not None:
            return admin

        admin = Admin(
            name=settings.admin_name,
            email=email,
            password_hash=await hash_password_async(settings.admin_password),
        )
        db.add(admin)
        await db.flush()
        logger.info("Bootstrapped admin account %s", admin.id)
        return admin


auth_service = AuthService()
