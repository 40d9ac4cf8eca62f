"""
Resolution of symbolic range selectors into concrete time windows.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from ..models.series import EPOCH_ORIGIN, RangeKind, RangeSelector, TimeWindow, ensure_utc

logger = logging.getLogger(__name__)

RANGE_DURATIONS = {
    RangeKind.LAST_24H: timedelta(hours=24),
    RangeKind.LAST_7D: timedelta(days=7),
    RangeKind.LAST_30D: timedelta(days=30),
    RangeKind.LAST_90D: timedelta(days=90),
}

# Used when a custom selector is missing a bound.
CUSTOM_FALLBACK = RangeKind.LAST_30D


def resolve_window(selector: RangeSelector, now: Optional[datetime] = None) -> TimeWindow:
    """
    Convert a range selector into a concrete time window.

    Rolling selectors end at ``now``. A custom selector passes its bounds
    through verbatim, or falls back to the 30-day window when either bound
    is missing or start is after end. The 'all' selector starts at the
    epoch origin and is the only window flagged unbounded; upstream
    fetching is expected to have applied any real range restriction.

    Args:
        selector: The symbolic range selector
        now: Reference instant, defaults to the current UTC time

    Returns:
        The resolved TimeWindow
    """
    end = ensure_utc(now) if now is not None else datetime.now(timezone.utc)

    if selector.kind is RangeKind.CUSTOM:
        if selector.start is None or selector.end is None:
            logger.debug("Custom range missing a bound, falling back to last 30 days")
        elif ensure_utc(selector.start) > ensure_utc(selector.end):
            logger.warning(
                f"Custom range start {selector.start} is after end {selector.end}, "
                f"falling back to last 30 days"
            )
        else:
            return TimeWindow(start=ensure_utc(selector.start), end=ensure_utc(selector.end))
        return TimeWindow(start=end - RANGE_DURATIONS[CUSTOM_FALLBACK], end=end)

    if selector.kind is RangeKind.ALL:
        return TimeWindow(start=EPOCH_ORIGIN, end=max(end, EPOCH_ORIGIN), unbounded=True)

    return TimeWindow(start=end - RANGE_DURATIONS[selector.kind], end=end)
