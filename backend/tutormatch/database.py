"""
TutorMatch Backend — Database Session Management
==================================================

What:  The async engine, the session factory and the per-request session
       dependency shared by every route.
How:   PostgreSQL (asyncpg) in deployment, SQLite (aiosqlite) under test;
       the URL comes from settings.database_url.

Transaction boundaries:
    One session (and one transaction) per request. Services only flush;
    get_db_session() commits once the handler returns. Row locks taken by
    services (SELECT ... FOR UPDATE on a tutor) are therefore held until the
    whole request's writes are committed, which is what serializes booking
    creation and rating recomputation per tutor.
"""

from typing import Any, AsyncGenerator, Dict

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from tutormatch.config import settings


def _engine_options() -> Dict[str, Any]:
    """Pool options for the configured backend (SQLite pools take no sizing)."""
    options: Dict[str, Any] = {
        "pool_pre_ping": settings.db_pool_pre_ping,
        "echo": settings.log_level == "DEBUG",
    }
    if not settings.database_url.startswith("sqlite"):
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_recycle=3600,
        )
    return options


engine = create_async_engine(settings.database_url, **_engine_options())

# expire_on_commit=False: attributes stay readable after commit without a
# lazy reload, which async sessions cannot do implicitly
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models (shared metadata for Alembic)."""
    pass


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    One session per request: the handler and every service it calls share
    it. Commit happens here after the handler returns; any exception rolls
    the whole request back and propagates to the exception handlers.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def dispose_engine() -> None:
    """Closes all pooled connections; called from the lifespan on shutdown."""
    await engine.dispose()
