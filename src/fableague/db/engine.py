"""Async SQLAlchemy engine and session factory (SQLite).

Usage:
    engine = create_engine(settings.database_url)
    await init_schema(engine)
    async with get_session(engine) as session:
        ...
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from fableague.db.models import Base

logger = logging.getLogger(__name__)


def _is_memory_url(database_url: str) -> bool:
    return ":memory:" in database_url or database_url.rstrip("/").endswith("sqlite+aiosqlite:")


def create_engine(database_url: str) -> AsyncEngine:
    """Create an async SQLAlchemy engine.

    File databases get WAL journal mode and a 15-second busy timeout so the
    web process and admin scripts can share them. In-memory databases are
    pinned to a single connection so every session sees the same data.
    """
    kwargs: dict[str, object] = {"echo": False, "connect_args": {"timeout": 15}}
    if _is_memory_url(database_url):
        kwargs["poolclass"] = StaticPool

    engine = create_async_engine(database_url, **kwargs)

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragmas(dbapi_conn: object, connection_record: object) -> None:
        cursor = dbapi_conn.cursor()  # type: ignore[union-attr]
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA synchronous=NORMAL")
        cursor.execute("PRAGMA busy_timeout=15000")
        cursor.close()

    return engine


async def init_schema(engine: AsyncEngine) -> None:
    """Create any missing tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("schema_ready tables=%s", sorted(Base.metadata.tables))


# One session factory per engine instance, keyed by the engine's sync_engine
# identity so test engines stay isolated.
_session_factories: dict[int, tuple[AsyncEngine, async_sessionmaker[AsyncSession]]] = {}


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Return a cached session factory bound to *engine*."""
    key = id(engine.sync_engine)
    cached = _session_factories.get(key)
    # ids are reused once an engine is garbage collected
    if cached is None or cached[0] is not engine:
        cached = (engine, async_sessionmaker(engine, expire_on_commit=False))
        _session_factories[key] = cached
    return cached[1]


@asynccontextmanager
async def get_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Yield an async session that auto-commits on success, rolls back on error."""
    factory = create_session_factory(engine)
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:  # rolled back, then re-raised
            await session.rollback()
            raise
