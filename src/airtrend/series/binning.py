"""
Adaptive time-series downsampling.

This module reduces an unbounded, time-stamped sample sequence to a
bounded sequence of chart points. Sequences already within the point
budget pass through untouched; longer ones are grouped into fixed-width
time bins and each bin is averaged into a single representative point.

Bin widths snap to human-meaningful buckets (1 hour, 6 hours, 1 day or a
whole number of days) and bin boundaries are anchored to the Unix epoch
rather than to the window start, so the same instant always lands in the
same bin when the window shifts between renders.

The aggregation step runs on a Polars DataFrame: one row per valid sample
carrying its input position, epoch hour and value, grouped by bin start.
"""

import itertools
import logging
import math
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

import polars as pl

from ..models.series import ChartPoint, Sample, TimeWindow, TransformMeta, TransformResult
from .metrics import get_metric_spec

logger = logging.getLogger(__name__)

SECONDS_PER_HOUR = 3600

# A valid sample paired with the metric value extracted from it.
ValuedSample = Tuple[Sample, float]
LabelFunc = Callable[[datetime], str]


def _iso_label(instant: datetime) -> str:
    return instant.isoformat()


def round_half_up(value: float, precision: int = 0) -> float:
    """Round to ``precision`` decimals with halves going up (2.5 -> 3)."""
    factor = 10 ** precision
    return math.floor(value * factor + 0.5) / factor


def compute_bin_width_hours(window: TimeWindow, point_budget: int) -> int:
    """
    Bin width for a window that must be reduced to about point_budget bins.

    The raw width ceil(range_hours / budget) is snapped up to 1, 6 or 24
    hours, or to the next multiple of 24 hours beyond a day.
    """
    if point_budget < 1:
        raise ValueError(f"point_budget must be >= 1, got {point_budget}")
    raw_bin = math.ceil(window.range_hours / point_budget)
    if raw_bin <= 1:
        return 1
    if raw_bin <= 6:
        return 6
    if raw_bin <= 24:
        return 24
    return math.ceil(raw_bin / 24) * 24


def epoch_hour(instant: datetime) -> int:
    """Whole hours since the epoch, floored."""
    return math.floor(instant.timestamp() / SECONDS_PER_HOUR)


def bin_start_hour(instant: datetime, bin_width_hours: int) -> int:
    """Epoch hour at which the bin containing ``instant`` starts."""
    return (epoch_hour(instant) // bin_width_hours) * bin_width_hours


def filter_window(samples: Iterable[Sample], window: TimeWindow) -> List[Sample]:
    """
    Keep samples inside the window, both ends inclusive.

    The unbounded 'all' window is trusted: upstream fetching already
    decided what belongs in it, so nothing is dropped.
    """
    if window.is_unbounded:
        logger.debug("Unbounded window, trusting upstream range filtering")
        return list(samples)
    return [sample for sample in samples if window.contains(sample.timestamp)]


def sort_chronologically(samples: Iterable[Sample]) -> List[Sample]:
    """Stable chronological sort; equal timestamps keep input order."""
    return sorted(samples, key=lambda sample: sample.timestamp)


def select_valid(samples: Iterable[Sample], metric_key: str) -> List[ValuedSample]:
    """Drop samples whose metric value is missing or non-finite."""
    valid = []
    for sample in samples:
        value = sample.metric_value(metric_key)
        if value is not None:
            valid.append((sample, value))
    return valid


class BinningEngine:
    """
    Downsamples samples for one metric into a TransformResult.

    The engine only reads its input; samples are referenced by the output
    points, never copied or modified.
    """

    def __init__(self, label_func: Optional[LabelFunc] = None):
        self.label_func = label_func or _iso_label

    def transform(
        self,
        samples: Sequence[Sample],
        window: TimeWindow,
        metric_key: str,
        point_budget: int,
        label_func: Optional[LabelFunc] = None,
    ) -> TransformResult:
        """
        Filter, sort and (if needed) bin samples for one metric.

        Args:
            samples: Raw samples in any order
            window: Time window the chart covers
            metric_key: Metric to extract from each sample
            point_budget: Target maximum number of points
            label_func: Optional per-call display label builder

        Returns:
            TransformResult with chronologically ordered points
        """
        in_window = filter_window(samples, window)
        if not in_window:
            return empty_result(len(samples))
        return self.transform_prepared(
            sort_chronologically(in_window), window, metric_key, point_budget, label_func
        )

    def transform_prepared(
        self,
        ordered_samples: Sequence[Sample],
        window: TimeWindow,
        metric_key: str,
        point_budget: int,
        label_func: Optional[LabelFunc] = None,
    ) -> TransformResult:
        """
        Transform samples that are already window-filtered and sorted.

        This lets several metrics share one filter and sort pass.
        """
        if point_budget < 1:
            raise ValueError(f"point_budget must be >= 1, got {point_budget}")

        label = label_func or self.label_func
        valid = select_valid(ordered_samples, metric_key)
        if not valid:
            return empty_result(len(ordered_samples))

        precision = get_metric_spec(metric_key).precision

        if len(valid) <= point_budget:
            points = _passthrough(valid, precision, label)
            return TransformResult(
                points=points,
                meta=TransformMeta(
                    original_count=len(valid),
                    rendered_count=len(points),
                    bin_width_hours=0,
                ),
            )

        bin_width_hours = compute_bin_width_hours(window, point_budget)
        points = _aggregate_bins(valid, bin_width_hours, precision, label)

        logger.debug(
            f"Binned {len(valid)} '{metric_key}' samples into {len(points)} points "
            f"({bin_width_hours}h bins, budget {point_budget})"
        )
        return TransformResult(
            points=points,
            meta=TransformMeta(
                original_count=len(valid),
                rendered_count=len(points),
                bin_width_hours=bin_width_hours,
            ),
        )


def empty_result(original_count: int) -> TransformResult:
    return TransformResult(
        points=[],
        meta=TransformMeta(original_count=original_count, rendered_count=0, bin_width_hours=0),
    )


def _passthrough(valid: List[ValuedSample], precision: int, label: LabelFunc) -> List[ChartPoint]:
    """
    One point per sample. Samples sharing an exact timestamp are merged so
    that output timestamps stay unique.
    """
    points = []
    for timestamp, group in itertools.groupby(valid, key=lambda item: item[0].timestamp):
        members = list(group)
        first_sample, first_value = members[0]
        if len(members) == 1:
            value = first_value
            original_count = None
        else:
            value = round_half_up(sum(v for _, v in members) / len(members), precision)
            original_count = len(members)
        points.append(
            ChartPoint(
                timestamp=timestamp,
                display_label=label(timestamp),
                value=value,
                source_sample=first_sample,
                original_count=original_count,
            )
        )
    return points


def _aggregate_bins(
    valid: List[ValuedSample],
    bin_width_hours: int,
    precision: int,
    label: LabelFunc,
) -> List[ChartPoint]:
    """
    Group samples into epoch-anchored bins and average each bin.

    The representative sample of a bin is its first (earliest) member.
    """
    frame = pl.DataFrame(
        {
            "row": list(range(len(valid))),
            "epoch_hour": [epoch_hour(sample.timestamp) for sample, _ in valid],
            "value": [value for _, value in valid],
        },
        schema={"row": pl.Int64, "epoch_hour": pl.Int64, "value": pl.Float64},
    )

    bins = (
        frame.with_columns(
            ((pl.col("epoch_hour") // bin_width_hours) * bin_width_hours).alias("bin_hour")
        )
        .group_by("bin_hour", maintain_order=True)
        .agg(
            pl.col("value").mean().alias("mean_value"),
            pl.col("row").min().alias("first_row"),
            pl.len().alias("count"),
        )
        .sort("bin_hour")
    )

    points = []
    for row in bins.iter_rows(named=True):
        bin_timestamp = datetime.fromtimestamp(row["bin_hour"] * SECONDS_PER_HOUR, tz=timezone.utc)
        count = row["count"]
        points.append(
            ChartPoint(
                timestamp=bin_timestamp,
                display_label=label(bin_timestamp),
                value=round_half_up(row["mean_value"], precision),
                source_sample=valid[row["first_row"]][0],
                original_count=count if count > 1 else None,
            )
        )
    return points
