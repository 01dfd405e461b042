"""Declarative base, key strategies and timestamp mixins.

Source entities (users, topics, posts) get time-sortable UUIDv7 string
ids; engagement rows (likes, views, comments, follows) get autoincrement
integers so key order is insertion order.

Example:
    class Post(Base, UUIDv7PKMixin, TimestampMixin):
        __tablename__ = "posts"
        title: Mapped[str] = mapped_column(String(255))
"""

from __future__ import annotations

import secrets
import threading
import time
import uuid
from datetime import UTC, datetime

from sqlalchemy import JSON, DateTime, MetaData, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import func

# Stable constraint names keep Alembic autogenerate diffs quiet
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

JSONDocument = JSON().with_variant(JSONB(), "postgresql")


class Base(DeclarativeBase):
    metadata = MetaData(naming_convention=NAMING_CONVENTION)


class _MonotonicUUID7:
    """UUIDv7 source that never goes backwards within a process.

    Ids minted in the same millisecond share the timestamp and carry an
    increasing 12-bit sequence in ``rand_a``; when the sequence overflows
    the timestamp is advanced by one millisecond.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._last_ms = 0
        self._sequence = 0

    def __call__(self) -> uuid.UUID:
        with self._lock:
            now_ms = time.time_ns() // 1_000_000
            if now_ms > self._last_ms:
                self._last_ms, self._sequence = now_ms, secrets.randbits(6)
            elif self._sequence < 0xFFF:
                self._sequence += 1
            else:
                self._last_ms, self._sequence = self._last_ms + 1, 0
            millis, sequence = self._last_ms, self._sequence

        value = millis << 80 | 0x7 << 76 | sequence << 64 | 0b10 << 62 | secrets.randbits(62)
        return uuid.UUID(int=value)


uuid7 = _MonotonicUUID7()


def generate_id() -> str:
    """New canonical UUIDv7 string; later calls compare greater."""
    return str(uuid7())


class IntegerPKMixin:
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)


class UUIDv7PKMixin:
    """String primary key, so ids embed verbatim in snapshots and page tokens."""

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class CreatedAtMixin:
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False
    )


class TimestampMixin(CreatedAtMixin):
    """Python-side defaults fill both columns at flush, so no refresh is needed."""

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        server_default=func.now(),
        onupdate=_utcnow,
        nullable=False,
    )


__all__ = [
    "NAMING_CONVENTION",
    "Base",
    "CreatedAtMixin",
    "IntegerPKMixin",
    "JSONDocument",
    "TimestampMixin",
    "UUIDv7PKMixin",
    "generate_id",
    "uuid7",
]
