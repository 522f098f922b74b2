"""
TutorMatch Backend — Request ID Middleware
============================================

What:  Assigns each request a correlation ID and returns it in X-Request-ID.
How:   Uses the client's X-Request-ID when present, otherwise a short random
       id. The value is kept in a ContextVar for loggers and error handlers,
       and on request.state for route code.

Error bodies carry the same id as `request_id`, so a user reporting a failed
booking can hand support a value that matches the server log lines.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own id
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

MAX_CLIENT_ID_LENGTH = 64


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID", "")[:MAX_CLIENT_ID_LENGTH]
        if not rid:
            # 8 hex chars is plenty for correlating log lines
            rid = uuid.uuid4().hex[:8]

        # Not reset afterwards: the outermost 500 handler still reads it
        request_id_var.set(rid)
        request.state.request_id = rid
        response = await call_next(request)

        response.headers["X-Request-ID"] = rid
        return response
