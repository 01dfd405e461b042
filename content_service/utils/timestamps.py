"""Timestamp normalization for JSON documents.

Aggregate snapshots store datetimes as fixed-width UTC strings so that
string comparison inside the store is temporal comparison::

    2025-01-15T10:30:00.000000Z
"""

from __future__ import annotations

from datetime import UTC, datetime

SNAPSHOT_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


def format_timestamp(value: datetime) -> str:
    """Render ``value`` in snapshot form. Naive values are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).strftime(SNAPSHOT_FORMAT)


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO 8601 string (``Z`` suffix allowed) into an aware UTC datetime.

    Raises:
        ValueError: If ``value`` is not ISO 8601.
    """
    parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def normalize_timestamp(value: str) -> str:
    """Parse and re-render an ISO 8601 string in snapshot form."""
    return format_timestamp(parse_timestamp(value))
