"""
utils/timeutils.py — UTC clock helpers shared by models and services.

All timestamps are stored and compared as timezone-aware UTC. SQLite hands
DateTime(timezone=True) columns back naive, so every comparison goes through
as_utc() first.
"""

from __future__ import annotations

from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Attaches UTC to a naive datetime; converts an aware one to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
