"""
Series transform orchestration.

Ties together window resolution, point budget selection, downsampling and
display labelling for one or more named metrics drawn from a single raw
fetch.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, Optional, Sequence

from ..models.config import ChartConfig
from ..models.series import RangeSelector, Sample, TransformResult, ensure_utc
from .binning import BinningEngine, empty_result, filter_window, sort_chronologically
from .labels import LabelFormatter
from .thresholds import ThresholdSelector
from .time_window import resolve_window

logger = logging.getLogger(__name__)


class SeriesTransformer:
    """
    Produces bounded, labelled chart series from raw samples.

    The window filter and chronological sort run once per call; each
    metric then applies its own missing-value filter, so a gap in one
    channel never removes points from another.
    """

    def __init__(
        self,
        chart_config: Optional[ChartConfig] = None,
        engine: Optional[BinningEngine] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.config = chart_config or ChartConfig()
        self.threshold_selector = ThresholdSelector(self.config)
        self.label_formatter = LabelFormatter(
            relative_days=self.config.relative_label_days,
            display_timezone=self.config.display_timezone,
        )
        self.engine = engine or BinningEngine()
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    @classmethod
    def from_config(cls) -> "SeriesTransformer":
        """Build a transformer from the global application configuration."""
        from ..config import get_config

        return cls(chart_config=get_config().chart)

    def transform(
        self,
        samples: Sequence[Sample],
        selector: RangeSelector,
        metric_key: str,
        surface_width_px: Optional[float] = None,
        point_budget: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> TransformResult:
        """
        Transform samples for a single metric.

        Args:
            samples: Raw samples from the data-fetch layer, in any order
            selector: Range selected by the user
            metric_key: Metric to chart (e.g. 'aqi', 'temperature')
            surface_width_px: Measured chart width; None means unmeasurable
            point_budget: Explicit budget overriding the width-based one
            now: Reference instant for window resolution and labels

        Returns:
            The bounded TransformResult for the metric
        """
        return self.transform_many(
            samples,
            selector,
            [metric_key],
            surface_width_px=surface_width_px,
            point_budget=point_budget,
            now=now,
        )[metric_key]

    def transform_many(
        self,
        samples: Sequence[Sample],
        selector: RangeSelector,
        metric_keys: Iterable[str],
        surface_width_px: Optional[float] = None,
        point_budget: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> Dict[str, TransformResult]:
        """
        Transform samples for several metrics from one raw fetch.

        Returns:
            Mapping of metric key to its TransformResult
        """
        reference = ensure_utc(now) if now is not None else self._clock()
        window = resolve_window(selector, reference)
        budget = point_budget if point_budget is not None else self.threshold_selector.select(surface_width_px)

        def label(instant: datetime) -> str:
            return self.label_formatter.format(instant, selector.kind, reference)

        in_window = filter_window(samples, window)
        ordered = sort_chronologically(in_window)

        results = {}
        for metric_key in metric_keys:
            if not ordered:
                results[metric_key] = empty_result(len(samples))
                continue
            results[metric_key] = self.engine.transform_prepared(
                ordered, window, metric_key, budget, label
            )

        logger.debug(
            f"Transformed {len(samples)} samples for {selector.kind.value} "
            f"({len(results)} metrics, budget {budget})"
        )
        return results
