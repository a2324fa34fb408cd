"""
PageNotes Backend — Database Engine & Session Management
==========================================================

What:  Async SQLAlchemy engine construction, session factory, FastAPI session
       dependency, and startup/shutdown helpers.
Why:   Keeps all connection handling in one place; the engine is built from
       Settings and stored on app.state so tests can point it at SQLite.
How:   create_async_engine with pooling for PostgreSQL (asyncpg); SQLite
       (aiosqlite, used in tests) gets the dialect's default pool.

Durability:
    Services commit their own writes before returning, so a successful
    response always means the row is persisted. get_db_session only guarantees
    rollback on error and returning the connection to the pool.
"""

import logging
from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from pagenotes.config import Settings
from pagenotes.exceptions import DatabaseError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares one metadata object between the models, init_models() and Alembic.
    """
    pass


def build_engine(settings: Settings) -> AsyncEngine:
    """
    What:  Creates the async engine for the configured database.
    Why:   Pool sizing only applies to server databases; SQLite pools reject
           pool_size/max_overflow.
    """
    url = settings.sqlalchemy_database_url
    options = {"echo": settings.log_level == "DEBUG"}
    if not settings.is_sqlite:
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return create_async_engine(url, **options)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False: services read attributes (id, username) after commit
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Opens a session from the factory on app.state
        2. Yields it to the route handler
        3. On error: rolls back anything left uncommitted
        4. Always: closes the session (returns connection to pool)
    """
    session_factory: async_sessionmaker[AsyncSession] = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_models(engine: AsyncEngine) -> None:
    """
    What:  Creates any missing tables (users, notes) and their indexes.
    When:  Application startup, before the first request is accepted.
    Raises:
        DatabaseError: The database is unreachable or rejected the DDL.
            Startup must abort in that case.
    """
    # Register models on Base.metadata
    from pagenotes.models import note, user  # noqa: F401

    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    except (SQLAlchemyError, OSError) as e:
        logger.critical("Database initialization failed: %s", e)
        raise DatabaseError(
            message="Database initialization failed",
            context={"error_type": type(e).__name__},
        ) from e
    logger.info("Database schema ready")


async def dispose_engine(engine: AsyncEngine) -> None:
    """Closes all pooled connections. Called on shutdown."""
    await engine.dispose()
