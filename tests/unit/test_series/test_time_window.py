"""
Unit tests for range selector resolution.
"""

from datetime import datetime, timedelta, timezone

import pytest

from airtrend.models import EPOCH_ORIGIN, RangeKind, RangeSelector, TimeWindow
from airtrend.series import resolve_window


@pytest.mark.unit
class TestResolveWindow:
    """Test cases for resolve_window."""

    @pytest.mark.parametrize(
        "kind, duration",
        [
            (RangeKind.LAST_24H, timedelta(hours=24)),
            (RangeKind.LAST_7D, timedelta(days=7)),
            (RangeKind.LAST_30D, timedelta(days=30)),
            (RangeKind.LAST_90D, timedelta(days=90)),
        ],
    )
    def test_rolling_windows_end_at_now(self, now, kind, duration):
        """Rolling selectors span their duration and end at now."""
        window = resolve_window(RangeSelector(kind), now)
        assert window.end == now
        assert window.start == now - duration

    def test_windows_are_monotonic(self, now):
        """Shorter rolling ranges never start earlier than longer ones."""
        starts = [
            resolve_window(RangeSelector(kind), now).start
            for kind in (RangeKind.LAST_24H, RangeKind.LAST_7D, RangeKind.LAST_30D, RangeKind.LAST_90D)
        ]
        assert starts == sorted(starts, reverse=True)

    def test_custom_passes_through(self, now):
        """A complete custom selector is used verbatim."""
        start = datetime(2024, 1, 1, tzinfo=timezone.utc)
        end = datetime(2024, 2, 1, tzinfo=timezone.utc)
        window = resolve_window(RangeSelector(RangeKind.CUSTOM, start=start, end=end), now)
        assert window == TimeWindow(start=start, end=end)

    @pytest.mark.parametrize("missing", ["start", "end", "both"])
    def test_custom_missing_bound_falls_back_to_30_days(self, now, missing):
        """Custom selectors without both bounds resolve like Last30d."""
        start = None if missing in ("start", "both") else datetime(2024, 1, 1, tzinfo=timezone.utc)
        end = None if missing in ("end", "both") else datetime(2024, 2, 1, tzinfo=timezone.utc)
        window = resolve_window(RangeSelector(RangeKind.CUSTOM, start=start, end=end), now)
        assert window == resolve_window(RangeSelector(RangeKind.LAST_30D), now)

    def test_all_starts_at_epoch(self, now):
        """The 'all' window starts at the epoch origin and is unbounded."""
        window = resolve_window(RangeSelector(RangeKind.ALL), now)
        assert window.start == EPOCH_ORIGIN
        assert window.end == now
        assert window.is_unbounded

    def test_naive_now_is_treated_as_utc(self):
        """A naive reference instant is interpreted as UTC."""
        window = resolve_window(RangeSelector(RangeKind.LAST_24H), datetime(2024, 6, 15, 12, 0))
        assert window.end == datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)

    def test_selector_parse(self):
        """Short names parse case-insensitively."""
        assert RangeSelector.parse("7D").kind is RangeKind.LAST_7D
        with pytest.raises(ValueError):
            RangeSelector.parse("1y")


@pytest.mark.unit
class TestTimeWindow:
    """Test cases for the TimeWindow model."""

    def test_start_after_end_rejected(self, now):
        with pytest.raises(ValueError):
            TimeWindow(start=now, end=now - timedelta(seconds=1))

    def test_contains_is_inclusive(self, now):
        """Both window bounds are inside the window."""
        window = TimeWindow(start=now - timedelta(hours=1), end=now)
        assert window.contains(window.start)
        assert window.contains(window.end)
        assert not window.contains(now + timedelta(microseconds=1))

    def test_range_hours(self, now):
        window = TimeWindow(start=now - timedelta(days=90), end=now)
        assert window.range_hours == 2160

    def test_reversed_custom_falls_back_to_30_days(self, now, caplog):
        """Start after end resolves like Last30d and is logged."""
        selector = RangeSelector(RangeKind.CUSTOM, start=now, end=now - timedelta(days=1))
        window = resolve_window(selector, now)
        assert window == resolve_window(RangeSelector(RangeKind.LAST_30D), now)
        assert "is after end" in caplog.text

    def test_only_all_is_unbounded(self, now):
        """A custom window reaching back before 1970 is still a filtered window."""
        selector = RangeSelector(
            RangeKind.CUSTOM,
            start=datetime(1969, 12, 31, tzinfo=timezone.utc),
            end=datetime(1970, 1, 2, tzinfo=timezone.utc),
        )
        window = resolve_window(selector, now)
        assert not window.is_unbounded
        assert not resolve_window(RangeSelector(RangeKind.LAST_90D), now).is_unbounded
