"""Database engine and session management for Relay."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, AsyncIterator, Optional

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from relay.config import Settings
from relay.middleware.error_handler import StorageException
from relay.models.base import Base

logger = logging.getLogger(__name__)


@asynccontextmanager
async def transaction(session: AsyncSession, operation: str) -> AsyncIterator[AsyncSession]:
    """Run a block atomically on ``session``, translating database failures.

    Opens a transaction when the session is idle. When the caller already
    has one open the block joins it and only flushes; committing or
    rolling back is then left to the caller.

    Raises:
        StorageException: A constraint was violated or the database failed.
            The original SQLAlchemy error is chained as ``__cause__``.
    """
    try:
        if session.in_transaction():
            yield session
            await session.flush()
        else:
            async with session.begin():
                yield session
    except IntegrityError as e:
        logger.error(
            f"Constraint violation during {operation}: {e.orig}",
            extra={"operation": operation},
        )
        raise StorageException(
            message=f"Constraint violation during {operation}",
            operation=operation,
        ) from e
    except SQLAlchemyError as e:
        logger.error(
            f"Database error during {operation}: {e}",
            extra={"operation": operation},
        )
        raise StorageException(
            message=f"Database error during {operation}",
            operation=operation,
        ) from e


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Owns the async engine and hands out sessions.

    SQLite databases get foreign key enforcement switched on for every
    connection and their parent directory created on demand.
    """

    def __init__(self, url: str, echo: bool = False):
        self.url = make_url(url)
        self._ensure_sqlite_directory()
        self.engine: AsyncEngine = create_async_engine(url, echo=echo)
        if self.is_sqlite:
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @property
    def is_sqlite(self) -> bool:
        return self.url.get_backend_name() == "sqlite"

    def _ensure_sqlite_directory(self) -> None:
        database = self.url.database
        if self.url.get_backend_name() != "sqlite" or not database or database == ":memory:":
            return
        Path(database).parent.mkdir(parents=True, exist_ok=True)

    async def create_all(self) -> None:
        """Create any missing tables."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info(f"Database schema ready: {self.url.render_as_string(hide_password=True)}")

    async def drop_all(self) -> None:
        """Drop every table known to the metadata."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    def session(self) -> AsyncSession:
        """Open a new session; use it as an async context manager."""
        return self.session_factory()

    async def dispose(self) -> None:
        """Close all pooled connections."""
        await self.engine.dispose()
        logger.info("Database connections closed")


_database: Optional[Database] = None


def get_database() -> Database:
    """Get the global database instance."""
    if _database is None:
        raise RuntimeError("Database not initialized. Call init_database() first.")
    return _database


async def init_database(settings: Settings) -> Database:
    """Initialize the global database and create the schema."""
    global _database
    _database = Database(settings.database_url, echo=settings.database_echo)
    await _database.create_all()
    return _database


async def close_database() -> None:
    """Dispose the global database, if any."""
    global _database
    if _database is not None:
        await _database.dispose()
        _database = None


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding a session bound to the global database."""
    async with get_database().session() as session:
        yield session
