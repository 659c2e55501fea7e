"""Clock access and timestamp formatting."""

from __future__ import annotations

import time
from datetime import datetime, timezone

import pendulum

# Human-readable output format: YYYY-MM-DD HH:MM:SS
DISPLAY_FORMAT = "YYYY-MM-DD HH:mm:ss"


def now_utc() -> datetime:
    """Return the current UTC datetime."""
    return datetime.now(timezone.utc)


def monotonic_ms() -> int:
    """Monotonic clock reading in milliseconds, for measuring durations."""
    return time.monotonic_ns() // 1_000_000


def format_timestamp(seconds: int, tz: str = "UTC") -> str:
    """Format unix seconds for display in the given timezone."""
    return pendulum.from_timestamp(seconds, tz=tz).format(DISPLAY_FORMAT)


def format_iso(dt: datetime) -> str:
    """Format datetime as ISO 8601 for JSON serialization."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.isoformat()
