"""SQLAlchemy ORM models for the URL shortener application.

This module defines the database schema using SQLAlchemy declarative models
with the uniqueness constraint that backs short-code allocation.

Data Model Layout
=================
::
    urls table
    ├─ id (SERIAL PRIMARY KEY)
    ├─ long_url (VARCHAR(2048) NOT NULL)
    ├─ short_code (VARCHAR(32) UNIQUE, INDEXED)
    ├─ created_at (TIMESTAMPTZ, DEFAULT NOW())
    └─ updated_at (TIMESTAMPTZ, DEFAULT NOW(), ON UPDATE)

How to Use
===========
**Step 1 — Import**::
    from app.models import URL

**Step 2 — Create a new URL**::
    url = URL(short_code="k3x9q0ab", long_url="https://example.com")
    db.add(url)
    await db.commit()

**Step 3 — Query URLs**::
    result = await db.execute(select(URL.long_url).where(URL.short_code == "k3x9q0ab"))
    long_url = result.scalar_one_or_none()

Key Behaviours
===============
- short_code carries a unique index: the store, not the application, decides
  whether a candidate code is free.
- long_url is not unique; the same URL may be shortened any number of times.
- created_at and updated_at are managed by the database.
- Rows are written once and never updated or deleted by the service.

Classes:
    URL:  Represents a long URL to short code mapping.
"""

import datetime

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base

__all__ = ["URL", "LONG_URL_MAX_LENGTH"]

LONG_URL_MAX_LENGTH = 2048


class URL(Base):
    __tablename__ = "urls"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    long_url: Mapped[str] = mapped_column(String(LONG_URL_MAX_LENGTH), nullable=False)
    short_code: Mapped[str] = mapped_column(String(32), unique=True, index=True, nullable=False)
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    def __repr__(self) -> str:
        return f"<URL(id={self.id}, short_code='{self.short_code}')>"
