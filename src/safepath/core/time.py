"""
Time parsing and timezone normalization.

Hazard clock ranges ("07:00-21:00") are local wall-clock times, so every instant
handed to the matcher is converted to the configured app timezone first.
"""

from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo


def ensure_tz(dt: datetime, timezone: str) -> datetime:
    """Ensure `dt` has tzinfo; attach `timezone` if naive."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=ZoneInfo(timezone))
    return dt


def to_local(dt: datetime, timezone: str) -> datetime:
    """Attach `timezone` to naive values, convert aware values into it."""
    if dt.tzinfo is None:
        return ensure_tz(dt, timezone)
    return dt.astimezone(ZoneInfo(timezone))


def now_in(timezone: str) -> datetime:
    return datetime.now(ZoneInfo(timezone))


def parse_datetime(value: str, timezone: str) -> datetime:
    """Parse ISO-8601 datetime string and ensure tzinfo is present.

    Notes:
    - Accepts a trailing `Z` (UTC) and converts it to `+00:00` for `fromisoformat`.
    - If the parsed value is naive, the provided `timezone` is attached.
    """
    value = value.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    dt = datetime.fromisoformat(value)
    return ensure_tz(dt, timezone)
