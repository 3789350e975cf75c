"""
Shared test fixtures for the Punchclock test suite.

Each test runs against a fresh in-memory aiosqlite database.
"""

import os
import uuid
from typing import AsyncGenerator

import pytest

# Override environment BEFORE importing application modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["CORS_ORIGINS"] = '["*"]'
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key-not-for-production"
os.environ["LOG_LEVEL"] = "WARNING"

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from punchclock.api.v1.deps import get_db
from punchclock.db.base import Base
from punchclock.main import app
from punchclock.models.user import User


@pytest.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    """Create all tables in a private in-memory database, dispose after use."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Return a raw database session for direct service calls in tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def async_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app and the test database."""

    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session):
    """Factory fixture: insert a user with the given role and manager."""

    async def _make(role: str = "MEMBER", manager_id: str | None = None, **kwargs) -> User:
        user = User(
            email=kwargs.pop("email", f"{uuid.uuid4().hex[:10]}@test.local"),
            hashed_password=kwargs.pop("hashed_password", "not-a-real-hash"),
            full_name=kwargs.pop("full_name", f"{role.title()} User"),
            role=role,
            manager_id=manager_id,
            **kwargs,
        )
        db_session.add(user)
        await db_session.commit()
        return user

    return _make
