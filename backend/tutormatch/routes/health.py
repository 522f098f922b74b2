"""
TutorMatch Backend — Health Check Route
=========================================

What:  Liveness/readiness endpoint for container probes and load balancers.

Status levels:
    - healthy:   database answered SELECT 1 (HTTP 200)
    - unhealthy: database unreachable (HTTP 503, stop routing traffic)

Bookings and reviews cannot be served without the database, so it is the
only dependency probed.
"""

import logging
import time

from fastapi import APIRouter, Response, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from tutormatch import __version__
from tutormatch.database import engine
from tutormatch.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Set once when the app imports the router
_started_at = time.time()


async def database_reachable() -> bool:
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Health check: database unreachable: %s", str(e))
        return False
    return True


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description="Reports database connectivity, version and uptime.",
)
async def health_check(response: Response) -> HealthResponse:
    reachable = await database_reachable()
    if not reachable:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return HealthResponse(
        status="healthy" if reachable else "unhealthy",
        version=__version__,
        database="connected" if reachable else "disconnected",
        uptime_seconds=round(time.time() - _started_at, 2),
    )
