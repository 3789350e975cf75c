"""
Async SQLAlchemy engine & session factory (asyncpg driver).
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from punchclock.core.config import settings
from punchclock.core.exceptions import StoreUnavailable

engine_args = {
    "echo": False,
    "pool_pre_ping": True,
}

if "postgresql" in settings.DATABASE_URL:
    engine_args.update(
        {
            "pool_size": 20,
            "max_overflow": 10,
            "pool_recycle": 300,
            "pool_timeout": settings.DB_POOL_TIMEOUT_SECONDS,
            "connect_args": {"timeout": settings.DB_CONNECT_TIMEOUT_SECONDS},
        }
    )

engine = create_async_engine(
    settings.DATABASE_URL,
    **engine_args,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


@contextmanager
def store_errors() -> Iterator[None]:
    """Translate connectivity failures into :class:`StoreUnavailable`."""
    try:
        yield
    except (OperationalError, InterfaceError, PoolTimeoutError) as exc:
        raise StoreUnavailable("Attendance store is unavailable") from exc
