# lockbox/db/session.py
"""
Engine and session factory for the vault database.

SQLite (aiosqlite) serves local development and the test suite; PostgreSQL
(asyncpg) serves deployments. Vault operations own their unit of work, so
sessions here never commit on their own.
"""
from typing import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool, AsyncAdaptedQueuePool

from lockbox.core.config import settings


def enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """
    SQLite ignores FOREIGN KEY clauses unless asked per connection.

    Platform and owner references are checked by the vault operations, and
    the constraint must back that check at the storage level too.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    """
    Engine for a vault database URL.

    SQLite gets one connection per checkout and enforced foreign keys;
    anything else gets a small pre-pinged pool.
    """
    if url.startswith("sqlite"):
        sqlite_engine = create_async_engine(
            url,
            echo=echo,
            poolclass=NullPool,
            connect_args={"check_same_thread": False},
        )
        enable_sqlite_foreign_keys(sqlite_engine)
        return sqlite_engine

    return create_async_engine(
        url,
        echo=echo,
        poolclass=AsyncAdaptedQueuePool,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,
        pool_recycle=300,
    )


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Read objects are projected after commit, and flushes are explicit
    return async_sessionmaker(
        bind=bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


engine: AsyncEngine = build_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)
AsyncSessionLocal = build_session_factory(engine)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """One session per request; the vault operation commits or rolls back."""
    async with AsyncSessionLocal() as session:
        yield session
