"""Persistence operations for URL mappings.

The allocator and resolver never touch SQLAlchemy directly. They go through
``URLStore``, which exposes the two logical operations of the mapping table
and one capability check:

::
    insert(long_url, short_code)        -> URL            (raises on failure)
    find_long_url(short_code)           -> str | None     (raises on failure)
    is_short_code_conflict(exc)         -> bool

``is_short_code_conflict`` answers "is this a uniqueness violation on
short_code and nothing else?". PostgreSQL reports SQLSTATE 23505 with the
index name in the message; SQLite reports ``UNIQUE constraint failed:
urls.short_code``. Both name the column, which is what the check keys on.
"""

from sqlalchemy import select, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import URL

__all__ = ["URLStore", "UNIQUE_VIOLATION_SQLSTATE"]

UNIQUE_VIOLATION_SQLSTATE = "23505"
SHORT_CODE_COLUMN = "short_code"


class URLStore:
    def __init__(self, db: AsyncSession):
        self._db = db

    async def insert(self, long_url: str, short_code: str) -> URL:
        """Insert a new mapping and commit it.

        The session is rolled back on any failure so the caller can issue
        another attempt on the same session.
        """
        url = URL(short_code=short_code, long_url=long_url)
        self._db.add(url)
        try:
            await self._db.commit()
        except Exception:
            await self._db.rollback()
            raise
        return url

    async def find_long_url(self, short_code: str) -> str | None:
        result = await self._db.execute(select(URL.long_url).where(URL.short_code == short_code))
        return result.scalar_one_or_none()

    async def ping(self) -> None:
        await self._db.execute(text("SELECT 1"))

    @staticmethod
    def is_short_code_conflict(exc: BaseException) -> bool:
        if not isinstance(exc, IntegrityError):
            return False

        orig = exc.orig
        sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
        message = str(orig)

        if sqlstate is not None:
            return sqlstate == UNIQUE_VIOLATION_SQLSTATE and SHORT_CODE_COLUMN in message
        return message.startswith("UNIQUE constraint failed") and f"urls.{SHORT_CODE_COLUMN}" in message
