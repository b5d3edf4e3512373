"""Pytest configuration for all tests."""

import os

# Must be set before feedgate is imported: settings are cached and the
# module-level app is built from them.
os.environ.setdefault("FEEDGATE_ENVIRONMENT", "testing")
os.environ.setdefault("FEEDGATE_SECRET_KEY", "test-secret-key-0123456789abcdef0123456789")
os.environ.setdefault("FEEDGATE_BCRYPT_ROUNDS", "4")
os.environ.setdefault("FEEDGATE_DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from typing import AsyncGenerator  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from feedgate.core.config import get_settings  # noqa: E402
from feedgate.infrastructure.auth import TokenCodec  # noqa: E402
from feedgate.infrastructure.persistence.database import Base  # noqa: E402
from feedgate.infrastructure.persistence.models import UserModel  # noqa: E402, F401

TEST_SECRET = "unit-test-signing-secret-0123456789abcdef"


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session.

    Uses an in-memory SQLite database for testing.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        yield session
        await session.rollback()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def codec() -> TokenCodec:
    """A token codec with a fixed test secret."""
    return TokenCodec(secret=TEST_SECRET, key_id="test")


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with overridden database dependency."""
    from feedgate.infrastructure.api.app import app
    from feedgate.infrastructure.persistence.database import close_database, get_db_session

    app.dependency_overrides[get_db_session] = lambda: db_session

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides = {}
    await close_database()


@pytest.fixture
def app_codec() -> TokenCodec:
    """The codec the application signs and verifies tokens with."""
    from feedgate.infrastructure.api.app import app

    return app.state.token_codec


@pytest.fixture
def settings():
    return get_settings()
