"""Datetime helpers.

Provides UTC timestamp helpers without using deprecated ``datetime.utcnow()``,
plus day-boundary normalization for API key validity windows.
"""

from __future__ import annotations

from datetime import UTC, datetime


def utcnow() -> datetime:
    """Return current UTC time as a naive datetime.

    API key timestamps are stored as naive UTC datetimes. This helper avoids
    ``datetime.utcnow()`` deprecation while preserving that storage behavior.
    """
    return datetime.now(UTC).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    """Convert an aware datetime to naive UTC. Naive values are returned as-is."""
    if value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)


def start_of_day(value: datetime) -> datetime:
    """Return 00:00:00.000 of the given day."""
    return to_naive_utc(value).replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(value: datetime) -> datetime:
    """Return 23:59:59.999 of the given day.

    Millisecond precision, so the stored bound round-trips through stores
    that truncate microseconds.
    """
    return to_naive_utc(value).replace(
        hour=23, minute=59, second=59, microsecond=999000
    )
