"""Shared pytest fixtures for API, store, and service tests."""

import sqlite3
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from app.config import Settings, get_settings
from app.database import Base, get_db
from app.main import app
from app.models import URL
from app.store import URLStore


def make_collision_error(short_code: str = "aaaaaaaa") -> IntegrityError:
    return IntegrityError(
        "INSERT INTO urls (long_url, short_code) VALUES (?, ?)",
        ("https://example.com", short_code),
        sqlite3.IntegrityError("UNIQUE constraint failed: urls.short_code"),
    )


def make_store_error() -> OperationalError:
    return OperationalError(
        "INSERT INTO urls (long_url, short_code) VALUES (?, ?)",
        None,
        sqlite3.OperationalError("unable to open database file"),
    )


class FakeURLStore:
    """In-memory store double that replays scripted insert failures.

    ``insert_failures`` are raised, in order, by the first inserts. With
    ``always_collide`` every insert reports a short_code uniqueness violation.
    """

    is_short_code_conflict = staticmethod(URLStore.is_short_code_conflict)

    def __init__(self, insert_failures=(), always_collide=False, lookup_error=None):
        self.insert_failures = list(insert_failures)
        self.always_collide = always_collide
        self.lookup_error = lookup_error
        self.insert_calls: list[str] = []
        self.records: dict[str, str] = {}

    async def insert(self, long_url: str, short_code: str) -> None:
        self.insert_calls.append(short_code)
        if self.always_collide:
            raise make_collision_error(short_code)
        if self.insert_failures:
            raise self.insert_failures.pop(0)
        if short_code in self.records:
            raise make_collision_error(short_code)
        self.records[short_code] = long_url

    async def find_long_url(self, short_code: str) -> str | None:
        if self.lookup_error is not None:
            raise self.lookup_error
        return self.records.get(short_code)

    async def ping(self) -> None:
        return None


class SequenceGenerator:
    """Candidate generator that hands out scripted codes and records calls."""

    def __init__(self, codes):
        self._codes = iter(codes)
        self.calls = 0

    def __call__(self, length: int) -> str:
        self.calls += 1
        return next(self._codes)


@pytest.fixture
def settings() -> Settings:
    return get_settings()


@pytest_asyncio.fixture(scope="function")
async def test_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def count_urls(session_factory):
    async def _count() -> int:
        async with session_factory() as session:
            result = await session.execute(select(func.count()).select_from(URL))
            return result.scalar_one()

    return _count


@pytest_asyncio.fixture(scope="function")
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
