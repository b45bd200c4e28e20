"""Async engine, session factory and schema lifecycle for the URL store.

The store is the only shared state in the service. Every request receives its
own ``AsyncSession`` from ``get_db``; the session lives exactly as long as the
request and is never handed to another one.

Session Lifecycle
=================
::
    request ──► get_db() ──► URLStore(session)
                                 │
                                 ├─ insert(): add + commit
                                 │     └─ any failure: rollback, re-raise
                                 │
                                 └─ find_long_url() / ping(): read only
    response ◄── session closed by the async context manager

Key Behaviours
===============
- ``URLStore.insert`` commits per attempt. A failed commit is rolled back
  before the exception leaves the store, so the same session is reusable for
  the next candidate code.
- The unique index on ``urls.short_code`` is the only synchronization point
  between concurrent requests and between service instances. There are no
  locks, counters or pre-reads.
- ``expire_on_commit=False``: the inserted row stays readable after commit.
- ``init_db`` creates missing tables at startup; ``close_db`` disposes of
  the pool at shutdown.
"""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from app.config import get_settings

__all__ = ["Base", "async_session", "close_db", "engine", "get_db", "init_db"]

settings = get_settings()

engine = create_async_engine(
    settings.DATABASE_URL,
    pool_size=settings.DATABASE_POOL_SIZE,
    max_overflow=settings.DATABASE_MAX_OVERFLOW,
    pool_pre_ping=True,
)

async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    """Declarative base for the ``urls`` table."""


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a session scoped to one request."""
    async with async_session() as session:
        yield session


async def init_db() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    await engine.dispose()
