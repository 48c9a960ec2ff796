"""SQLAlchemy ORM models.

The time-series store is a key-value table: one row per (symbol, date),
keyed by ``symbol + "_" + ISO date`` so that lexicographic key order matches
date order within a symbol. The payload is the JSON encoding of a RawRecord.
"""

from __future__ import annotations

from sqlalchemy import String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Declarative base for all Veronica tables."""


class RawRecordRow(Base):
    """A daily bar stored under its composite string key."""

    __tablename__ = "raw_records"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    payload: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:
        return f"RawRecordRow(key={self.key!r})"
