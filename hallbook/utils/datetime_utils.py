"""
Date and time helpers.

All timestamps in the relational store are naive UTC.
"""

from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Current time as naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    """Normalize an aware datetime to naive UTC; naive values pass through."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def format_time(value: Optional[datetime]) -> str:
    return value.strftime("%H:%M") if value else "--:--"


def format_date(value: Optional[datetime]) -> str:
    return value.strftime("%Y-%m-%d") if value else "-"


def to_iso_z(value: datetime) -> str:
    """ISO-8601 with a trailing Z for a naive UTC datetime."""
    return value.replace(microsecond=0).isoformat() + "Z"
