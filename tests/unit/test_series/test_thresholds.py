"""
Unit tests for adaptive point budget selection.
"""

import pytest

from airtrend.models import ChartConfig
from airtrend.series import SurfaceClass, ThresholdSelector, select_point_budget


@pytest.mark.unit
class TestThresholdSelector:
    """Test cases for ThresholdSelector."""

    @pytest.mark.parametrize(
        "width, expected",
        [
            (320, 400),
            (767, 400),
            (768, 600),
            (1023, 600),
            (1024, 1000),
            (2560, 1000),
        ],
    )
    def test_default_budgets(self, width, expected):
        """Widths map onto the narrow, medium and wide budgets."""
        assert ThresholdSelector().select(width) == expected

    def test_unmeasurable_surface_uses_wide_budget(self):
        """No width means the wide-class default."""
        assert ThresholdSelector().classify(None) is SurfaceClass.WIDE
        assert select_point_budget(None) == 1000

    def test_monotonic_in_width(self):
        """The budget never decreases as the surface grows."""
        selector = ThresholdSelector()
        budgets = [selector.select(width) for width in range(0, 3000, 7)]
        assert budgets == sorted(budgets)

    def test_custom_config(self):
        """Budgets and breakpoints come from the chart configuration."""
        config = ChartConfig(narrow_max_width=500, medium_max_width=900, narrow_budget=100,
                             medium_budget=200, wide_budget=300)
        selector = ThresholdSelector(config)
        assert selector.select(499) == 100
        assert selector.select(500) == 200
        assert selector.select(900) == 300
        assert select_point_budget(None, config) == 300
