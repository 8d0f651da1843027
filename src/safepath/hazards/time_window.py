"""
Hazard activity windows.

A hazard's `active_hours` string decides whether it is relevant at a given instant:
- `"All day"`: always active
- `"Monsoon"`: active during the fixed monsoon months (June..October)
- `"HH:MM-HH:MM"`: active when the local clock time is inside the inclusive range

Anything else is treated as inactive (fail-closed) and never raises, so one bad
catalog record cannot break a whole query.

Policy for daily ranges whose start is after their end (e.g. `"22:00-06:00"`):
they are malformed and never active. Overnight wraparound is not supported.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from functools import lru_cache
from typing import Protocol, Union

logger = logging.getLogger(__name__)

ALWAYS_ACTIVE = "All day"
SEASONAL = "Monsoon"

# Calendar months (1-based) of the monsoon season.
SEASONAL_MONTHS = frozenset({6, 7, 8, 9, 10})

_DAILY_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*-\s*(\d{1,2}):(\d{2})\s*$")


class HasActiveHours(Protocol):
    active_hours: str | None


@dataclass(frozen=True)
class AlwaysActive:
    def is_active(self, instant: datetime) -> bool:
        return True


@dataclass(frozen=True)
class SeasonalWindow:
    months: frozenset[int] = SEASONAL_MONTHS

    def is_active(self, instant: datetime) -> bool:
        return instant.month in self.months


@dataclass(frozen=True)
class DailyWindow:
    """Inclusive minute-of-day range; `end_minute` may be 1440 for "24:00"."""

    start_minute: int
    end_minute: int

    def is_active(self, instant: datetime) -> bool:
        now = instant.hour * 60 + instant.minute
        return self.start_minute <= now <= self.end_minute


@dataclass(frozen=True)
class MalformedWindow:
    raw: str | None
    reason: str

    def is_active(self, instant: datetime) -> bool:
        return False


ActivityWindow = Union[AlwaysActive, SeasonalWindow, DailyWindow, MalformedWindow]


def _minute_of_day(hour: str, minute: str, *, allow_end_of_day: bool) -> int | None:
    h = int(hour)
    m = int(minute)
    if allow_end_of_day and h == 24 and m == 0:
        return 24 * 60
    if not (0 <= h <= 23 and 0 <= m <= 59):
        return None
    return h * 60 + m


@lru_cache(maxsize=256)
def parse_active_hours(value: str | None) -> ActivityWindow:
    """Parse an `active_hours` string into a typed window (never raises)."""
    if value is None:
        return MalformedWindow(raw=None, reason="missing")
    if not isinstance(value, str):
        return MalformedWindow(raw=str(value), reason="not a string")

    text = value.strip()
    if text == ALWAYS_ACTIVE:
        return AlwaysActive()
    if text == SEASONAL:
        return SeasonalWindow()

    match = _DAILY_RE.match(text)
    if not match:
        return MalformedWindow(raw=value, reason="unrecognized format")

    start = _minute_of_day(match.group(1), match.group(2), allow_end_of_day=False)
    end = _minute_of_day(match.group(3), match.group(4), allow_end_of_day=True)
    if start is None or end is None:
        return MalformedWindow(raw=value, reason="clock value out of range")
    if start > end:
        return MalformedWindow(raw=value, reason="range crosses midnight")
    return DailyWindow(start_minute=start, end_minute=end)


def is_active(hazard: HasActiveHours, instant: datetime) -> bool:
    """Return True when the hazard's activity window covers `instant`.

    The instant is read as local wall-clock time: pass a datetime already in the
    timezone the catalog's clock ranges are written in.
    """
    window = parse_active_hours(hazard.active_hours)
    if isinstance(window, MalformedWindow):
        logger.debug("Treating hazard window %r as inactive (%s)", window.raw, window.reason)
    return window.is_active(instant)
