"""
Human-readable display labels for chart points.

Recent points get relative phrasing ("about 3 hours ago"); older points
get an absolute calendar label whose granularity follows the selected
range: hour-level for 24h/7d, day-level for 30d and full date otherwise.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from ..models.series import RangeKind, ensure_utc

MINUTE = 60
HOUR = 60 * MINUTE
DAY = 24 * HOUR
MONTH = 30 * DAY
YEAR = 365 * DAY


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}" if count == 1 else f"{count} {unit}s"


def describe_distance(seconds: float) -> str:
    """
    Phrase an absolute duration the way the dashboard shows ages.

    Rounding follows the usual "time ago" buckets: under 30 seconds is
    "less than a minute", hours are "about N hours", and so on.
    """
    seconds = abs(seconds)
    if seconds < 30:
        return "less than a minute"
    if seconds < 90:
        return "1 minute"
    if seconds < 45 * MINUTE:
        return _plural(round(seconds / MINUTE), "minute")
    if seconds < 90 * MINUTE:
        return "about 1 hour"
    if seconds < DAY:
        return f"about {_plural(round(seconds / HOUR), 'hour')}"
    if seconds < 42 * HOUR:
        return "1 day"
    if seconds < MONTH:
        return _plural(round(seconds / DAY), "day")
    if seconds < 45 * DAY:
        return "about 1 month"
    if seconds < 60 * DAY:
        return "about 2 months"
    if seconds < YEAR:
        return _plural(round(seconds / MONTH), "month")
    return f"about {_plural(int(seconds // YEAR), 'year')}"


def format_relative(instant: datetime, now: datetime) -> str:
    """Relative label with a direction suffix: '5 minutes ago' / 'in 1 day'."""
    delta = (ensure_utc(now) - ensure_utc(instant)).total_seconds()
    phrase = describe_distance(delta)
    if delta < 0:
        return f"in {phrase}"
    return f"{phrase} ago"


def format_absolute(instant: datetime, range_kind: RangeKind, tz: Optional[ZoneInfo] = None) -> str:
    local = ensure_utc(instant).astimezone(tz or timezone.utc)
    if range_kind in (RangeKind.LAST_24H, RangeKind.LAST_7D):
        return f"{local:%b} {local.day}, {local:%H:%M}"
    if range_kind is RangeKind.LAST_30D:
        return f"{local:%b} {local.day}"
    return f"{local:%b} {local.day}, {local.year}"


class LabelFormatter:
    """
    Builds the display label for a chart point timestamp.
    """

    def __init__(self, relative_days: int = 7, display_timezone: str = "UTC"):
        self.relative_window = timedelta(days=relative_days)
        self.tz = ZoneInfo(display_timezone)

    def format(self, instant: datetime, range_kind: RangeKind, now: datetime) -> str:
        if ensure_utc(now) - ensure_utc(instant) < self.relative_window:
            return format_relative(instant, now)
        return format_absolute(instant, range_kind, self.tz)
