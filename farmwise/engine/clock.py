"""
farmwise.engine.clock — Timezone helpers
=========================================

All engine timestamps are timezone-aware UTC.  SQLite hands back naive
datetimes for ``DateTime(timezone=True)`` columns, so anything read from
the database goes through :func:`as_utc` before it is compared.
"""

from __future__ import annotations

from datetime import UTC, datetime


def utcnow() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC; convert aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
