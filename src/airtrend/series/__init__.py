"""
Adaptive time-series downsampling for historical charts.

This package converts unbounded historical readings into bounded,
chart-renderable point sequences:
- time_window: range selector to concrete window resolution
- thresholds: point budgets keyed to the rendering surface width
- binning: epoch-anchored binning and averaging
- labels: relative and absolute display labels
- transform: per-metric orchestration of the above
- metrics: catalogue of charted metric channels
"""

from .binning import (
    BinningEngine,
    bin_start_hour,
    compute_bin_width_hours,
    empty_result,
    filter_window,
    round_half_up,
    select_valid,
    sort_chronologically,
)
from .labels import LabelFormatter, describe_distance, format_absolute, format_relative
from .metrics import METRIC_CATALOGUE, get_metric_spec
from .thresholds import SurfaceClass, ThresholdSelector, select_point_budget
from .time_window import resolve_window
from .transform import SeriesTransformer

__all__ = [
    "BinningEngine",
    "bin_start_hour",
    "compute_bin_width_hours",
    "empty_result",
    "filter_window",
    "round_half_up",
    "select_valid",
    "sort_chronologically",
    "LabelFormatter",
    "describe_distance",
    "format_absolute",
    "format_relative",
    "METRIC_CATALOGUE",
    "get_metric_spec",
    "SurfaceClass",
    "ThresholdSelector",
    "select_point_budget",
    "resolve_window",
    "SeriesTransformer",
]
