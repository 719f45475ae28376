"""
Time utilities for the API.

SQLite hands back naive datetimes; everything stored is UTC, so naive values
are treated as UTC before any arithmetic or formatting.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional


def ensure_utc(dt: datetime) -> datetime:
    """Attach UTC to naive datetimes and convert aware ones to UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def confirmation_due_at(created_at: datetime, deadline_days: int) -> datetime:
    """Date by which receipt of a report has to be confirmed."""
    return ensure_utc(created_at) + timedelta(days=deadline_days)


def is_confirmation_overdue(
    created_at: datetime,
    confirmation_sent: bool,
    deadline_days: int,
    now: Optional[datetime] = None,
) -> bool:
    """True while the confirmation is unsent and its deadline has passed."""
    if confirmation_sent:
        return False
    now = now or datetime.now(timezone.utc)
    return ensure_utc(now) > confirmation_due_at(created_at, deadline_days)


def format_german_date(dt: datetime) -> str:
    """
    Format a date the way German locales print it (e.g. "5.3.2024").

    No zero padding, matching the receipt text handlers are used to.
    """
    dt = ensure_utc(dt)
    return f"{dt.day}.{dt.month}.{dt.year}"


def format_german_datetime(dt: datetime) -> str:
    """Format a timestamp as "5.3.2024, 14:03:09" (UTC)."""
    dt = ensure_utc(dt)
    return f"{format_german_date(dt)}, {dt:%H:%M:%S}"
