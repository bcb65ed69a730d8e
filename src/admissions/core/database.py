"""
Database Configuration

Async SQLAlchemy engine, session factory and FastAPI session dependency.
The engine is created lazily so importing models never opens a connection.
"""

import logging
from collections.abc import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from admissions.core.config import settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_engine() -> AsyncEngine:
    """Get or create the async engine."""
    global _engine
    if _engine is None:
        _engine = create_async_engine(
            settings.database_url,
            echo=settings.database_echo,
            pool_pre_ping=True,
        )
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get or create the session factory bound to the engine."""
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
    return _session_factory


def async_session_maker() -> AsyncSession:
    """
    Open a new session outside of a request.

    Used by background jobs:
        async with async_session_maker() as db:
            ...
    """
    return get_session_factory()()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding a session per request."""
    async with async_session_maker() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """
    Verify the database connection on startup.

    In development the schema is created from the model metadata. Every other
    environment is migrated with Alembic (``alembic upgrade head``) before
    the API starts.
    """
    # Register every model on the metadata before create_all
    from admissions.modules.applications import models as _application_models  # noqa: F401
    from admissions.modules.calendar import models as _calendar_models  # noqa: F401
    from admissions.modules.notifications import models as _notification_models  # noqa: F401

    engine = get_engine()
    async with engine.begin() as conn:
        await conn.execute(text("SELECT 1"))
        if settings.is_development:
            await conn.run_sync(Base.metadata.create_all)
            logger.info("Database schema ensured (development mode)")
        else:
            logger.info("Database schema is managed by Alembic migrations")


async def close_db() -> None:
    """Dispose of the engine on shutdown."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None
