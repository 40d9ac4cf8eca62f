"""
Time-series data models.

This module defines the data structures that flow through the downsampling
pipeline: raw samples as delivered by the data-fetch layer, the range
selector and the concrete time window it resolves to, and the chart points
and result metadata handed to the rendering layer.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

# Sentinel start for the unbounded "all" window.
EPOCH_ORIGIN = datetime(1970, 1, 1, tzinfo=timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Return an aware datetime, treating naive values as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class RangeKind(Enum):
    """Symbolic range selectors offered by the history views."""

    LAST_24H = "24h"
    LAST_7D = "7d"
    LAST_30D = "30d"
    LAST_90D = "90d"
    ALL = "all"
    CUSTOM = "custom"


@dataclass(frozen=True)
class RangeSelector:
    """
    A range selector as chosen by the user.

    Only CUSTOM selectors carry bounds. A CUSTOM selector missing either
    bound resolves to the 30-day window.
    """

    kind: RangeKind
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    @classmethod
    def parse(cls, value: str) -> "RangeSelector":
        """Build a non-custom selector from its short name (e.g. '7d')."""
        return cls(RangeKind(value.lower()))


@dataclass(frozen=True)
class TimeWindow:
    """
    A concrete [start, end] instant pair; start <= end always holds.

    ``unbounded`` marks the window resolved for the 'all' selector, whose
    samples are trusted and never filtered. Only resolve_window sets it.
    """

    start: datetime
    end: datetime
    unbounded: bool = False

    def __post_init__(self):
        object.__setattr__(self, "start", ensure_utc(self.start))
        object.__setattr__(self, "end", ensure_utc(self.end))
        if self.start > self.end:
            raise ValueError(f"TimeWindow start {self.start} is after end {self.end}")

    @property
    def is_unbounded(self) -> bool:
        return self.unbounded

    @property
    def range_hours(self) -> float:
        return (self.end - self.start).total_seconds() / 3600.0

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant <= self.end


@dataclass(frozen=True)
class Sample:
    """
    One historical reading.

    Samples are owned by the data-fetch layer; the pipeline only holds
    references to them and never mutates them.
    """

    timestamp: datetime
    metric_values: Mapping[str, Optional[float]]
    location_label: str = ""
    source_id: Any = None

    def __post_init__(self):
        object.__setattr__(self, "timestamp", ensure_utc(self.timestamp))

    def metric_value(self, metric_key: str) -> Optional[float]:
        """
        Return the metric value if it is a finite number, otherwise None.
        """
        value = self.metric_values.get(metric_key)
        if value is None or isinstance(value, bool):
            return None
        try:
            number = float(value)
        except (TypeError, ValueError):
            return None
        if not math.isfinite(number):
            return None
        return number


@dataclass(frozen=True)
class MetricSpec:
    """Presentation details for a named metric channel."""

    key: str
    label: str
    unit: str = ""
    # Decimal places kept when a bin mean is rounded.
    precision: int = 0


@dataclass
class ChartPoint:
    """
    A single chart-renderable point.

    original_count is set only for aggregates of two or more samples; None
    means the point is a single, unbinned reading.
    """

    timestamp: datetime
    display_label: str
    value: float
    source_sample: Sample
    original_count: Optional[int] = None

    @property
    def is_aggregate(self) -> bool:
        return self.original_count is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "display_label": self.display_label,
            "value": self.value,
            "original_count": self.original_count,
            "location_label": self.source_sample.location_label,
            "source_id": self.source_sample.source_id,
        }


@dataclass
class TransformMeta:
    """Provenance of a transform: how many inputs produced how many points."""

    original_count: int
    rendered_count: int
    bin_width_hours: int

    @property
    def is_binned(self) -> bool:
        return self.bin_width_hours > 0


@dataclass
class TransformResult:
    """Chronologically ordered points plus their provenance metadata."""

    points: List[ChartPoint] = field(default_factory=list)
    meta: TransformMeta = field(default_factory=lambda: TransformMeta(0, 0, 0))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "points": [point.to_dict() for point in self.points],
            "meta": {
                "original_count": self.meta.original_count,
                "rendered_count": self.meta.rendered_count,
                "bin_width_hours": self.meta.bin_width_hours,
            },
        }
