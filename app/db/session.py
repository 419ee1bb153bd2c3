"""
Async SQLAlchemy engine & session factory.

Production runs on PostgreSQL through asyncpg; the test suite builds its own
in-memory aiosqlite engine with the same helpers.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import (AsyncEngine, AsyncSession,
                                    async_sessionmaker, create_async_engine)
from sqlalchemy.pool import StaticPool

from app.core.config import settings


def engine_options(url: str) -> dict[str, Any]:
    options: dict[str, Any] = {"echo": False, "pool_pre_ping": True}
    if url.startswith("postgresql"):
        options.update(pool_size=20, max_overflow=10, pool_recycle=300)
    elif url.startswith("sqlite") and ":memory:" in url:
        # One shared connection; a second one would see an empty database
        options.update(poolclass=StaticPool, connect_args={"check_same_thread": False})
    return options


def build_engine(url: str) -> AsyncEngine:
    return create_async_engine(url, **engine_options(url))


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Records are returned to callers after commit, so keep them loaded
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


engine = build_engine(settings.DATABASE_URL)
async_session_factory = build_session_factory(engine)
