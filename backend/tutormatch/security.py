"""
TutorMatch Backend — Password Hashing & Access Tokens
=======================================================

What:  argon2 password hashing and JWT issue/verify helpers.
Who:   AuthService (signup/login/admin bootstrap) and the principal
       dependency in dependencies.py.

Token format:
    HS256 JWT with claims {"id": "<uuid>", "role": "student|tutor|admin",
    "exp": <unix time>}. Expiry defaults to 30 days. Tokens are stateless,
    so logout is a client-side concern.

Hashing runs in the default thread pool: argon2 is deliberately slow and
would otherwise stall the event loop for every login.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

from tutormatch.config import settings
from tutormatch.exceptions import UnauthorizedError

logger = logging.getLogger(__name__)

STUDENT = "student"
TUTOR = "tutor"
ADMIN = "admin"
ROLES = (STUDENT, TUTOR, ADMIN)

_hasher = PasswordHasher()


@dataclass(frozen=True)
class Principal:
    """The authenticated caller, resolved from a bearer token."""

    id: uuid.UUID
    role: str
    name: str = ""

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN

    def is_student(self, student_id: uuid.UUID) -> bool:
        return self.role == STUDENT and self.id == student_id

    def is_tutor(self, tutor_id: uuid.UUID) -> bool:
        return self.role == TUTOR and self.id == tutor_id


# ── Passwords ─────────────────────────────────────────────────────────────

def hash_password(password: str) -> str:
    return _hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """True when the password matches; malformed hashes count as a mismatch."""
    try:
        return _hasher.verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return False


async def hash_password_async(password: str) -> str:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, hash_password, password)


async def verify_password_async(password: str, password_hash: str) -> bool:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, verify_password, password, password_hash)


# ── Tokens ────────────────────────────────────────────────────────────────

def create_access_token(
    principal_id: uuid.UUID,
    role: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Issue a signed token for a student, tutor or admin."""
    if role not in ROLES:
        raise ValueError(f"Unknown role '{role}'")
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(days=settings.access_token_expire_days)
    )
    claims = {"id": str(principal_id), "role": role, "exp": expire}
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Verify signature and expiry and return {"id": UUID, "role": str}.

    Raises:
        UnauthorizedError: "Token expired" or "Invalid token"
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise UnauthorizedError("Token expired")
    except jwt.PyJWTError as e:
        logger.info("Rejected access token: %s", type(e).__name__)
        raise UnauthorizedError("Invalid token")

    role = payload.get("role")
    try:
        principal_id = uuid.UUID(str(payload.get("id")))
    except ValueError:
        raise UnauthorizedError("Invalid token")
    if role not in ROLES:
        raise UnauthorizedError("Invalid token")
    return {"id": principal_id, "role": role}
