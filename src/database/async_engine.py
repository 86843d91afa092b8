"""Async SQLAlchemy engine for the reviewer store.

One process-wide engine and session factory, created lazily from
DatabaseSettings. SQLite (aiosqlite) is the default; PostgreSQL (asyncpg)
gets a real connection pool. Schema bootstrap and shutdown hooks are used
by the FastAPI lifespan.
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool
from sqlalchemy import event, text

from config.database import DatabaseSettings, get_database_settings

logger = logging.getLogger(__name__)


# Process-wide instances, built on first use
_async_engine: Optional[AsyncEngine] = None
_async_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def create_engine(settings: Optional[DatabaseSettings] = None) -> AsyncEngine:
    """Build a new engine for ``settings`` (or the environment's settings)."""
    settings = settings or get_database_settings()
    target = settings.name if settings.is_postgres else str(settings.sqlite_path)
    logger.info(f"Opening {settings.driver} engine for {target}")

    if settings.is_sqlite:
        # One file, one writer: no pooling
        pool_options = {"poolclass": NullPool}
    else:
        pool_options = dict(
            pool_size=settings.pool_size,
            max_overflow=settings.max_overflow,
            pool_timeout=settings.pool_timeout,
            pool_recycle=settings.pool_recycle,
            pool_pre_ping=settings.pool_pre_ping,
        )

    engine = create_async_engine(
        settings.async_url,
        echo=settings.echo_sql,
        connect_args=settings.get_connect_args(),
        **pool_options,
    )
    _setup_engine_events(engine, settings)
    return engine


def _setup_engine_events(engine: AsyncEngine, settings: DatabaseSettings) -> None:
    """Apply per-connection SQLite pragmas."""
    if not settings.is_sqlite:
        return

    @event.listens_for(engine.sync_engine, "connect")
    def _sqlite_pragmas(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        # SQLite leaves foreign keys off unless asked
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA synchronous=NORMAL")
        cursor.close()


def get_session_factory(
    engine: Optional[AsyncEngine] = None,
    settings: Optional[DatabaseSettings] = None,
) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to ``engine`` (default: the global engine)."""
    return async_sessionmaker(
        bind=engine or get_async_engine(settings),
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


def get_async_engine(settings: Optional[DatabaseSettings] = None) -> AsyncEngine:
    global _async_engine
    if _async_engine is None:
        _async_engine = create_engine(settings)
    return _async_engine


def get_async_session_factory(
    settings: Optional[DatabaseSettings] = None,
) -> async_sessionmaker[AsyncSession]:
    """The global session factory used by UnitOfWork when none is injected."""
    global _async_session_factory
    if _async_session_factory is None:
        _async_session_factory = get_session_factory(get_async_engine(settings))
    return _async_session_factory


async def check_database_connection(settings: Optional[DatabaseSettings] = None) -> bool:
    """Run ``SELECT 1``; False (and an error log) if the database is unreachable."""
    try:
        async with get_async_engine(settings).connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Database connection check failed: {e}")
        return False
    return True


async def init_database(settings: Optional[DatabaseSettings] = None) -> None:
    """
    Create the schema on SQLite.

    PostgreSQL schemas are owned by Alembic (``alembic upgrade head``).
    """
    settings = settings or get_database_settings()
    if not settings.is_sqlite:
        logger.info("PostgreSQL schema is managed by Alembic; skipping create_all")
        return

    from database.models import Base

    async with get_async_engine(settings).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"SQLite schema ready at {settings.sqlite_path}")


async def close_database() -> None:
    """Dispose the global engine; the next call to get_async_engine rebuilds it."""
    global _async_engine, _async_session_factory
    if _async_engine is None:
        return

    logger.info("Disposing database engine")
    await _async_engine.dispose()
    _async_engine = None
    _async_session_factory = None


class DatabaseHealth:
    """Database probe used by the /health endpoint."""

    def __init__(self, settings: Optional[DatabaseSettings] = None):
        self.settings = settings or get_database_settings()

    async def check(self) -> dict:
        if not await check_database_connection(self.settings):
            return {"status": "unhealthy", "driver": self.settings.driver}
        return {
            "status": "healthy",
            "database": self.settings.name if self.settings.is_postgres else "sqlite",
            "driver": self.settings.driver,
        }
