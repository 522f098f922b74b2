"""
TutorMatch Backend — Rate Limiting Middleware
===============================================

What:  Per-IP sliding window rate limiter with two buckets.
How:   Timestamps per (bucket, IP) in memory; requests older than the window
       are dropped before counting.

Buckets:
    auth     /api/auth/*      settings.auth_rate_limit_requests per window
    general  everything else  settings.rate_limit_requests per window

    The auth bucket is small so login and signup guessing is throttled
    long before the general limit. A client's auth requests do not use up
    its general allowance and vice versa.

Algorithm: Sliding Window Log
    1. Drop the key's timestamps older than now - window
    2. If the remaining count >= limit, reject with 429 and Retry-After
    3. Otherwise record now and let the request through

Limitations:
    State is per process. Running several uvicorn workers multiplies the
    effective limit by the worker count; a shared store (e.g. Redis) would
    be needed for a strict global limit.
"""

import logging
import time
from collections import defaultdict
from typing import Dict, List, Tuple

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from tutormatch.config import settings
from tutormatch.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)

AUTH_PREFIX = "/api/auth/"
GENERAL = "general"
AUTH = "auth"


class RateLimitMiddleware(BaseHTTPMiddleware):

    EXCLUDED_PATHS = {"/health", "/docs", "/openapi.json", "/redoc"}

    # Sweep idle keys every this many recorded requests
    CLEANUP_EVERY = 1000

    def __init__(self, app, **kwargs):
        super().__init__(app, **kwargs)
        self._requests: Dict[Tuple[str, str], List[float]] = defaultdict(list)
        self._recorded = 0

    @staticmethod
    def _bucket_for(path: str) -> Tuple[str, int]:
        if path.startswith(AUTH_PREFIX):
            return AUTH, settings.auth_rate_limit_requests
        return GENERAL, settings.rate_limit_requests

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in self.EXCLUDED_PATHS:
            return await call_next(request)

        # Behind a proxy this is the proxy's address unless uvicorn is run
        # with --proxy-headers
        client_ip = request.client.host if request.client else "unknown"
        bucket, limit = self._bucket_for(path)
        key = (bucket, client_ip)

        now = time.time()
        window = settings.rate_limit_window
        window_start = now - window

        timestamps = [ts for ts in self._requests[key] if ts > window_start]
        self._requests[key] = timestamps

        if len(timestamps) >= limit:
            retry_after = int(timestamps[0] + window - now) + 1
            logger.warning(
                "Rate limit exceeded for IP %s (%s bucket): %d requests in %ds window",
                client_ip,
                bucket,
                len(timestamps),
                window,
            )
            return JSONResponse(
                status_code=429,
                content={
                    "success": False,
                    "error": "rate_limit_exceeded",
                    "message": f"Too many requests. Please wait {retry_after} seconds before retrying.",
                    "details": {"retry_after": retry_after, "bucket": bucket},
                    "request_id": request_id_var.get("") or None,
                },
                headers={"Retry-After": str(retry_after)},
            )

        timestamps.append(now)
        self._recorded += 1
        if self._recorded % self.CLEANUP_EVERY == 0:
            self._cleanup_inactive(window_start)

        return await call_next(request)

    def _cleanup_inactive(self, window_start: float) -> None:
        """Forget keys with no request inside the current window."""
        inactive = [
            key for key, timestamps in self._requests.items()
            if not timestamps or timestamps[-1] <= window_start
        ]
        for key in inactive:
            del self._requests[key]

        if inactive:
            logger.debug("Cleaned up %d inactive rate-limit entries", len(inactive))
