"""
Adaptive point budgets keyed to the rendering surface's size class.
"""

from enum import Enum
from typing import Optional

from ..models.config import ChartConfig


class SurfaceClass(Enum):
    NARROW = "narrow"
    MEDIUM = "medium"
    WIDE = "wide"


class ThresholdSelector:
    """
    Chooses the maximum point budget for a chart.

    The budget is a target rather than a hard cap and is non-decreasing in
    surface width. When no width can be measured (headless rendering) the
    wide-class budget applies.
    """

    def __init__(self, chart_config: Optional[ChartConfig] = None):
        self.config = chart_config or ChartConfig()

    def classify(self, surface_width_px: Optional[float]) -> SurfaceClass:
        if surface_width_px is None:
            return SurfaceClass.WIDE
        if surface_width_px < self.config.narrow_max_width:
            return SurfaceClass.NARROW
        if surface_width_px < self.config.medium_max_width:
            return SurfaceClass.MEDIUM
        return SurfaceClass.WIDE

    def select(self, surface_width_px: Optional[float] = None) -> int:
        """Return the point budget for a surface of the given pixel width."""
        surface = self.classify(surface_width_px)
        if surface is SurfaceClass.NARROW:
            return self.config.narrow_budget
        if surface is SurfaceClass.MEDIUM:
            return self.config.medium_budget
        return self.config.wide_budget


def select_point_budget(surface_width_px: Optional[float] = None,
                        chart_config: Optional[ChartConfig] = None) -> int:
    """Convenience wrapper around ThresholdSelector.select()."""
    return ThresholdSelector(chart_config).select(surface_width_px)
