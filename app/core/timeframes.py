"""
Time frames - trailing windows used by both the query API and the dashboard

One mapping from token to offset so the server-side query and the
client-side window filter can never disagree.
"""

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Iterable, TypeVar


class TimeFrame(str, Enum):
    """Trailing window selector."""

    HOUR = "1h"
    SIX_HOURS = "6h"
    DAY = "24h"
    WEEK = "7d"
    MONTH = "30d"


DEFAULT_TIME_FRAME = TimeFrame.DAY

TIME_FRAME_OFFSETS: dict[TimeFrame, timedelta] = {
    TimeFrame.HOUR: timedelta(hours=1),
    TimeFrame.SIX_HOURS: timedelta(hours=6),
    TimeFrame.DAY: timedelta(days=1),
    TimeFrame.WEEK: timedelta(days=7),
    TimeFrame.MONTH: timedelta(days=30),
}

T = TypeVar("T")


def utcnow() -> datetime:
    """Current instant, timezone-aware UTC."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Treat naive datetimes (SQLite) as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def resolve_time_frame(token: str | TimeFrame | None) -> TimeFrame:
    """Parse a token; anything unrecognised falls back to 24h."""
    if isinstance(token, TimeFrame):
        return token
    try:
        return TimeFrame(token)
    except ValueError:
        return DEFAULT_TIME_FRAME


def time_frame_offset(token: str | TimeFrame | None) -> timedelta:
    return TIME_FRAME_OFFSETS[resolve_time_frame(token)]


def compute_cutoff(token: str | TimeFrame | None, now: datetime | None = None) -> datetime:
    """Earliest instant included in the window: now - offset(token)."""
    now = ensure_utc(now) if now is not None else utcnow()
    return now - time_frame_offset(token)


def filter_by_time_frame(
    readings: Iterable[T],
    token: str | TimeFrame | None,
    now: datetime | None = None,
) -> list[T]:
    """
    Narrow readings to those at or after the window cutoff.

    Works on anything with a `timestamp` datetime attribute (ORM rows or
    API models). Input order is preserved.
    """
    cutoff = compute_cutoff(token, now)
    return [r for r in readings if ensure_utc(r.timestamp) >= cutoff]
