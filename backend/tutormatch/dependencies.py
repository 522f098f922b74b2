"""
TutorMatch Backend — Request Dependencies
===========================================

What:  FastAPI dependencies that turn a bearer token into a Principal and
       gate routes by role.
How:   get_current_principal() decodes the token, then loads the matching
       row so deleted accounts lose access immediately. The principal is
       also stored on request.state for the access log.

Usage in a route:
    @router.post("/bookings")
    async def create_booking(principal: Principal = Depends(require_student), ...):
"""

from typing import Callable, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from tutormatch.database import get_db_session
from tutormatch.exceptions import ForbiddenError, UnauthorizedError
from tutormatch.models import Admin, Student, Tutor
from tutormatch.security import ADMIN, STUDENT, TUTOR, Principal, decode_access_token

_bearer_scheme = HTTPBearer(auto_error=False)

_ROLE_MODELS = {
    STUDENT: Student,
    TUTOR: Tutor,
    ADMIN: Admin,
}


async def get_current_principal(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> Principal:
    """
    Resolve the authenticated caller.

    Raises:
        UnauthorizedError: no token, bad/expired token, or the account is gone
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Not authorized")

    claims = decode_access_token(credentials.credentials)
    model = _ROLE_MODELS[claims["role"]]
    account = await db.get(model, claims["id"])
    if account is None:
        raise UnauthorizedError("Not authorized")

    principal = Principal(id=account.id, role=claims["role"], name=account.name)
    request.state.principal = principal
    return principal


def require_role(role: str) -> Callable:
    """Build a dependency that only lets principals of `role` through."""

    async def _require(principal: Principal = Depends(get_current_principal)) -> Principal:
        if principal.role != role:
            raise ForbiddenError(f"{role.capitalize()} access required")
        return principal

    return _require


require_student = require_role(STUDENT)
require_tutor = require_role(TUTOR)
require_admin = require_role(ADMIN)
