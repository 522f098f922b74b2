"""
TutorMatch Backend — Request Logging Middleware
=================================================

What:  One access-log line per HTTP request on the "tutormatch.access" logger.
When:  Runs inside RequestIDMiddleware, so the request id is available.

Line format:
    PATCH /api/bookings/6f1c... 409 12.4ms [a1b2c3d4] from 10.0.0.7 as tutor

    The same values are attached as `extra` fields for log shippers that
    index record attributes.

What we log vs what we DON'T:
    ✅ method, path, status, duration, IP, request ID, principal role
    ❌ request bodies (passwords on auth routes), Authorization headers
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from tutormatch.middleware.request_id import request_id_var

access_logger = logging.getLogger("tutormatch.access")

# Probes hit this every few seconds
UNLOGGED_PATHS = frozenset({"/health"})


def level_for_status(status_code: int) -> int:
    """5xx → ERROR, 4xx → WARNING, everything else → INFO."""
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in UNLOGGED_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        # Set by dependencies.get_current_principal on authenticated routes
        principal = getattr(request.state, "principal", None)
        fields = {
            "request_id": request_id_var.get(""),
            "method": request.method,
            "path": request.url.path,
            "status": response.status_code,
            "duration_ms": round(elapsed_ms, 2),
            "client_ip": request.client.host if request.client else "unknown",
            "role": principal.role if principal is not None else "anonymous",
        }
        access_logger.log(
            level_for_status(response.status_code),
            "%s %s %d %.1fms [%s] from %s as %s",
            fields["method"],
            fields["path"],
            fields["status"],
            elapsed_ms,
            fields["request_id"],
            fields["client_ip"],
            fields["role"],
            extra=fields,
        )
        return response
