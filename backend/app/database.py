"""
TouristMap Backend: Database Engine Management
================================================

What:  Async SQLAlchemy engine factory, session factory and declarative base.
How:   Builds an async engine over the aiosqlite driver with a bounded
       connection pool and switches on SQLite foreign-key enforcement for
       every pooled connection.
Who:   Used by the SQLite storage engine (services/sqlite_store.py).
When:  One engine per opened store; disposed on application shutdown.

Connection Pooling Strategy:
    pool_size / max_overflow bound the number of concurrent connections.
    A caller that finds the pool exhausted waits up to pool_timeout seconds
    and then receives sqlalchemy.exc.TimeoutError, which the storage engine
    reports as StorageUnavailableError.

    SQLite serializes writers with a file lock. The driver-level `timeout`
    makes a blocked writer wait for the lock instead of failing at once.
"""

import logging

from sqlalchemy import URL, event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from app.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    All models share this metadata; the storage engine creates the schema
    from it with `Base.metadata.create_all`.
    """
    pass


def sqlite_url(path: str) -> URL:
    """Build the aiosqlite connection URL for a database file path."""
    return URL.create("sqlite+aiosqlite", database=path)


def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite ships with foreign keys off; cascading deletes and the
    # rates.point_id reference depend on it being on for every connection.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_engine_for_path(path: str, config: Settings = default_settings) -> AsyncEngine:
    """
    Create a pooled async engine for the SQLite file at `path`.

    The pool settings come from `config`; SQL echo is enabled when the log
    level is DEBUG.
    """
    engine = create_async_engine(
        sqlite_url(path),
        pool_size=config.db_pool_size,
        max_overflow=config.db_max_overflow,
        pool_timeout=config.db_pool_timeout,
        pool_pre_ping=config.db_pool_pre_ping,
        connect_args={"timeout": config.db_busy_timeout},
        echo=config.log_level == "DEBUG",
    )
    event.listen(engine.sync_engine, "connect", _enable_foreign_keys)
    logger.debug(
        "Engine created for %s (pool_size=%d, max_overflow=%d, pool_timeout=%.1fs)",
        path,
        config.db_pool_size,
        config.db_max_overflow,
        config.db_pool_timeout,
    )
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Session factory bound to `engine`.

    expire_on_commit=False keeps loaded attributes readable after the
    transaction closes.
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
