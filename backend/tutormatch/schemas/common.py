"""
TutorMatch Backend — Shared Response Schemas
==============================================

What:  Error, message and health payloads used by every router.
Why:   Clients parse one error shape regardless of which endpoint failed.
"""

from typing import Optional

from pydantic import BaseModel, Field

# Zero-padded 24-hour "HH:MM"; lexicographic order equals time order
TIME_PATTERN = r"^([01][0-9]|2[0-3]):[0-5][0-9]$"
EMAIL_PATTERN = r"^\S+@\S+\.\S+$"


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "success": false,
            "error": "conflict",
            "message": "Slot already booked",
            "request_id": "1f3a9c2e"
        }
    """
    success: bool = Field(default=False)
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    """Returned by GET /health for container probes and load balancers."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
