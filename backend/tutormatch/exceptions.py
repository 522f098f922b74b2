"""
TutorMatch Backend — Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions, one per failure kind.
Why:   Services raise exactly one of these per failed operation; the global
       handlers in main.py map each kind to a status code and a uniform
       `{success: false, error, message, request_id}` body.
Who:   Raised by services and auth dependencies; caught by global handlers.

Exception Hierarchy:
    TutorMatchError (base)
    ├── ValidationError     → 400 Bad Request (business-rule input errors)
    ├── UnauthorizedError   → 401 Unauthorized (bad credential or wrong principal)
    ├── ForbiddenError      → 403 Forbidden (authenticated, not permitted)
    ├── NotFoundError       → 404 Not Found
    ├── ConflictError       → 409 Conflict (slot taken, duplicate review/account)
    └── DatabaseError       → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class TutorMatchError(Exception):
    """
    Base exception for all TutorMatch application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    status_code = 500
    error_code = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(TutorMatchError):
    """
    Raised when client input breaks a business rule the schema cannot express.

    When:    Malformed availability, unconfirmed booking for payment,
             password sent to the profile endpoint.
    HTTP:    400 Bad Request (schema errors stay on FastAPI's 422)
    """

    status_code = 400
    error_code = "validation_error"

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class UnauthorizedError(TutorMatchError):
    """
    Missing/invalid credential, or a principal that is not a party to the resource.

    HTTP:    401 Unauthorized
    """

    status_code = 401
    error_code = "unauthorized"

    def __init__(
        self,
        message: str = "Not authorized",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(TutorMatchError):
    """
    Authenticated, but the principal's role may not perform this action.

    HTTP:    403 Forbidden
    """

    status_code = 403
    error_code = "forbidden"

    def __init__(
        self,
        message: str = "Forbidden",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(TutorMatchError):
    """
    Raised when a referenced entity does not exist.

    SQLAlchemy returns None for missing records; services convert that into
    NotFoundError so route handlers never check for None themselves.
    """

    status_code = 404
    error_code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource.capitalize()} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource = resource


class ConflictError(TutorMatchError):
    """
    The request collides with existing state.

    When:    Booking slot unavailable or already booked, duplicate review,
             duplicate username/email, illegal booking status change.
    HTTP:    409 Conflict. The message is returned verbatim to the client.
    """

    status_code = 409
    error_code = "conflict"

    def __init__(
        self,
        message: str = "Conflict occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(TutorMatchError):
    """
    Raised when database operations fail unexpectedly.

    Security Note:
        The message returned to the client is always generic. Constraint
        names and SQL are logged server-side only.
    """

    status_code = 500
    error_code = "server_error"

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
