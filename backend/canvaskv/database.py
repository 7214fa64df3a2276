"""
CanvasKV Gateway: Database Engine Management
=============================================

What:  Async SQLAlchemy engine and session factory builders for the sql store.
How:   `build_engine()` creates an async engine with connection pooling from
       the settings; `build_session_factory()` wraps it in an async_sessionmaker.
Who:   Used by `stores.build_store()` when KV_BACKEND=sql, and by Alembic.
When:  Once per application instance (inside create_app()).

Connection Pooling Strategy:
    pool_size=20, max_overflow=10, pool_pre_ping, pool_recycle=3600 for
    PostgreSQL. SQLite URLs (tests, local development) skip the pool options
    since SQLAlchemy picks a dedicated pool class for them.
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from canvaskv.config import Settings


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Registers models with a shared metadata object that Alembic reads.
    """
    pass


def build_engine(settings: Settings) -> AsyncEngine:
    """
    Create the async engine for `settings.database_url`.

    Echoes SQL when LOG_LEVEL=DEBUG.
    """
    url = settings.database_url
    if url.startswith("sqlite"):
        return create_async_engine(url, echo=settings.log_level == "DEBUG")

    return create_async_engine(
        url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=settings.db_pool_pre_ping,
        pool_recycle=3600,
        echo=settings.log_level == "DEBUG",
    )


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False: rows are read after commit in a few places
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
