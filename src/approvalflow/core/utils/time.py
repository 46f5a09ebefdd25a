"""Shared UTC time helpers.

Every module that needs the current UTC timestamp goes through ``utc_now``
so tests can rely on timezone-aware datetimes everywhere.
"""

from __future__ import annotations

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Return the current UTC timestamp."""
    return datetime.now(UTC)


def parse_datetime(raw: str | None) -> datetime | None:
    """Parse an ISO timestamp, returning None for empty values."""
    if not raw:
        return None
    return datetime.fromisoformat(raw)
