"""Async SQLAlchemy engine and sessions for the credential store.

One ``DatabaseManager`` per process owns the engine. Request handlers get a
session through the ``get_db_session`` dependency; the application lifespan
calls ``init_database`` and ``close_database``.
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncGenerator

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from feedgate.core.config import Settings, get_settings
from feedgate.core.logging import get_logger

logger = get_logger(__name__)


class Base(DeclarativeBase):
    """Declarative base shared by all FeedGate models."""


def _is_sqlite(url: str) -> bool:
    return make_url(url).get_backend_name() == "sqlite"


def _connect_args(url: str) -> dict[str, Any]:
    # aiosqlite hands the connection between threads
    return {"check_same_thread": False} if _is_sqlite(url) else {}


class DatabaseManager:
    """Owns the async engine and session factory for one database URL.

    Nothing connects until the engine is first used.
    """

    def __init__(self, url: str, echo: bool = False) -> None:
        self.url = url
        self.echo = echo
        self._engine: AsyncEngine | None = None
        self._sessions: async_sessionmaker[AsyncSession] | None = None

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "DatabaseManager":
        settings = settings or get_settings()
        return cls(settings.database_url, echo=settings.db_echo)

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            self._engine = create_async_engine(
                self.url, echo=self.echo, connect_args=_connect_args(self.url)
            )
            logger.info(
                "Credential store engine ready",
                database_url=self._engine.url.render_as_string(hide_password=True),
            )
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        # Objects stay readable after commit; services return them to callers.
        if self._sessions is None:
            self._sessions = async_sessionmaker(
                bind=self.engine, expire_on_commit=False, autoflush=False
            )
        return self._sessions

    async def create_tables(self) -> None:
        """Create every table registered on ``Base.metadata`` that is missing."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Credential store tables ensured", tables=sorted(Base.metadata.tables))

    async def disconnect(self) -> None:
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._sessions = None
        logger.info("Credential store engine disposed")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Open a session; an exception escaping the block rolls it back.

        Committing is left to the caller.
        """
        async with self.session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    async def check_connection(self) -> bool:
        """Run ``SELECT 1``; False if the store cannot be reached."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as e:
            logger.error("Credential store unreachable", error=str(e))
            return False
        return True


_db_manager: DatabaseManager | None = None


def get_db_manager() -> DatabaseManager:
    """Return the process-wide manager, building it from settings on first use."""
    global _db_manager
    if _db_manager is None:
        _db_manager = DatabaseManager.from_settings()
    return _db_manager


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request."""
    async with get_db_manager().session() as session:
        yield session


def ensure_sqlite_directory(settings: Settings) -> None:
    """Create the parent directory of a file-backed SQLite database."""
    url = make_url(settings.database_url)
    if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)


async def init_database() -> None:
    """Prepare the credential store at application startup.

    Tables are created outside production; production runs the Alembic
    migrations instead.

    Raises:
        RuntimeError: If the store cannot be reached.
    """
    # Register models on Base.metadata
    from feedgate.infrastructure.persistence.models import UserModel  # noqa: F401

    db = get_db_manager()
    settings = get_settings()
    ensure_sqlite_directory(settings)

    if not await db.check_connection():
        raise RuntimeError("Failed to connect to database")

    if settings.is_production:
        logger.info("Production: leaving schema to migrations")
        return
    await db.create_tables()


async def close_database() -> None:
    """Dispose the engine and forget the process-wide manager."""
    global _db_manager
    if _db_manager is not None:
        await _db_manager.disconnect()
        _db_manager = None
