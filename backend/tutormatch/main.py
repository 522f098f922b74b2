"""
TutorMatch Backend — FastAPI Application Factory
===================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   uvicorn (uvicorn tutormatch.main:app) and the test suite.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware Chain:                                       │
    │  ┌────────┐ ┌────────────┐ ┌─────────┐ ┌──────┐ ┌──────┐ │
    │  │ Req ID │→│ Rate Limit │→│ Logging │→│ GZip │→│ CORS │ │
    │  └────────┘ └────────────┘ └─────────┘ └──────┘ └──────┘ │
    │                                                          │
    │  Routers:                                                │
    │  auth · tutors · students · bookings · reviews ·         │
    │  admin · payments · health                               │
    │                                                          │
    │  Exception Handlers:                                     │
    │  TutorMatchError → its status_code │ DB → 500 │ * → 500  │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging, config validation (logged, not fatal), admin bootstrap
    Shutdown: dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from tutormatch import __version__
from tutormatch.config import settings
from tutormatch.database import async_session_factory, dispose_engine
from tutormatch.exceptions import DatabaseError, TutorMatchError, ValidationError
from tutormatch.middleware.logging import RequestLoggingMiddleware
from tutormatch.middleware.rate_limit import RateLimitMiddleware
from tutormatch.middleware.request_id import RequestIDMiddleware, request_id_var
from tutormatch.routes import admin, auth, bookings, health, payments, reviews, students, tutors
from tutormatch.services.auth_service import auth_service

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure the root logger once for the whole application.

    Format: 2024-01-15T12:00:00 [INFO] tutormatch.services.booking_service: ...
    Handlers: a single stdout stream (the container runtime collects it).
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party chatter; our access log replaces uvicorn's
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

async def bootstrap_admin() -> None:
    """Create the configured admin account in its own transaction."""
    async with async_session_factory() as session:
        try:
            await auth_service.ensure_admin(session)
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error("Admin bootstrap failed: %s", str(e))


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup runs before the yield, shutdown after it.

    Configuration problems are logged rather than fatal so /health can
    still answer and operators see the message in the container logs.
    """
    setup_logging()
    logger.info("=" * 60)
    logger.info("TutorMatch Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))

    await bootstrap_admin()

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("API docs: http://%s:%d/docs", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("TutorMatch Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(error: str, message: str, details=None) -> dict:
    body = {
        "success": False,
        "error": error,
        "message": message,
        "request_id": request_id_var.get("") or None,
    }
    if details:
        body["details"] = details
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map application exceptions to the uniform error body.

    Handler hierarchy:
        DatabaseError          → 500, generic message (details logged only)
        TutorMatchError (any)  → exc.status_code / exc.error_code
        Exception (fallback)   → 500 internal_server_error

    Pydantic request validation keeps FastAPI's default 422 response.
    Internal details (SQL, stack traces) never reach the client.
    """

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        rid = request_id_var.get("")
        logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "server_error", "An internal error occurred. Please try again later."
            ),
        )

    @app.exception_handler(TutorMatchError)
    async def handle_application_error(request: Request, exc: TutorMatchError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error("[%s] %s: %s | Context: %s", rid, exc.error_code, exc.message, exc.context)
        else:
            logger.info("[%s] %s: %s", rid, exc.error_code, exc.message)

        # Only validation errors expose their context (the offending field)
        details = exc.context if isinstance(exc, ValidationError) else None
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.error_code, exc.message, details),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "internal_server_error",
                "An unexpected error occurred. Please try again or contact support.",
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Assemble middleware, exception handlers and routers.

    Tests build a fresh app per test and override get_db_session; the
    module-level `app` below is what uvicorn serves.
    """
    app = FastAPI(
        title="TutorMatch API",
        description=(
            "Tutoring marketplace backend: student and tutor accounts, tutor search, "
            "slot bookings with conflict checking, reviews and payment-intent stubs."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → RateLimit → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(auth.router)
    app.include_router(tutors.router)
    app.include_router(students.router)
    app.include_router(bookings.router)
    app.include_router(reviews.router)
    app.include_router(admin.router)
    app.include_router(payments.router)
    app.include_router(health.router)

    return app


# uvicorn expects `tutormatch.main:app` to be importable
app = create_app()
