"""
Sample files and transform output.

A sample file is a table with one row per reading: a `timestamp` column
(timezone-aware datetimes, ISO 8601 strings or epoch seconds), optional
`location_label` and `source_id` columns, and one numeric column per
metric. Null metric cells are missing readings.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import polars as pl

from ..models.series import Sample, TransformResult, ensure_utc
from .base import DataStorage
from .factory import create_storage, storage_for_path

logger = logging.getLogger(__name__)

TIMESTAMP_COLUMN = "timestamp"
LOCATION_COLUMN = "location_label"
SOURCE_COLUMN = "source_id"
RESERVED_COLUMNS = (TIMESTAMP_COLUMN, LOCATION_COLUMN, SOURCE_COLUMN)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Coerce a timestamp cell to an aware UTC datetime, or None if unusable."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    if isinstance(value, str):
        try:
            return ensure_utc(datetime.fromisoformat(value.strip()))
        except ValueError:
            return None
    return None


def samples_from_frame(df: pl.DataFrame, metric_keys: Optional[Iterable[str]] = None) -> List[Sample]:
    """
    Build samples from a table.

    Rows without a usable timestamp are skipped. Metric values are kept as
    read; invalid ones are filtered later by the transform.

    Raises:
        ValueError: If the table has no timestamp column
    """
    if TIMESTAMP_COLUMN not in df.columns:
        raise ValueError(f"Sample table has no '{TIMESTAMP_COLUMN}' column (columns: {df.columns})")

    if metric_keys is None:
        metric_columns = [column for column in df.columns if column not in RESERVED_COLUMNS]
    else:
        metric_columns = [key for key in metric_keys if key in df.columns]

    samples = []
    skipped = 0
    for row in df.iter_rows(named=True):
        timestamp = parse_timestamp(row[TIMESTAMP_COLUMN])
        if timestamp is None:
            skipped += 1
            continue
        samples.append(
            Sample(
                timestamp=timestamp,
                metric_values={key: row[key] for key in metric_columns},
                location_label=row.get(LOCATION_COLUMN) or "",
                source_id=row.get(SOURCE_COLUMN),
            )
        )

    if skipped:
        logger.warning(f"Skipped {skipped} rows without a usable timestamp")
    logger.debug(f"Built {len(samples)} samples with metrics {metric_columns}")
    return samples


def samples_to_frame(samples: Sequence[Sample]) -> pl.DataFrame:
    """Inverse of samples_from_frame; metric columns are the union over all samples."""
    metric_keys: List[str] = []
    for sample in samples:
        for key in sample.metric_values:
            if key not in metric_keys:
                metric_keys.append(key)

    columns: Dict[str, list] = {
        TIMESTAMP_COLUMN: [sample.timestamp for sample in samples],
        LOCATION_COLUMN: [sample.location_label for sample in samples],
        SOURCE_COLUMN: [None if s.source_id is None else str(s.source_id) for s in samples],
    }
    schema: Dict[str, Any] = {
        TIMESTAMP_COLUMN: pl.Datetime("us", "UTC"),
        LOCATION_COLUMN: pl.Utf8,
        SOURCE_COLUMN: pl.Utf8,
    }
    for key in metric_keys:
        columns[key] = [_as_float(sample.metric_values.get(key)) for sample in samples]
        schema[key] = pl.Float64
    return pl.DataFrame(columns, schema=schema)


def _as_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def load_samples(
    path: str,
    metric_keys: Optional[Iterable[str]] = None,
    storage: Optional[DataStorage] = None,
) -> List[Sample]:
    """
    Load samples from a Parquet or JSON file.

    Raises:
        FileNotFoundError: If the file does not exist
    """
    storage = storage or storage_for_path(path)
    if not storage.file_exists(path):
        raise FileNotFoundError(f"Sample file not found: {path}")
    df = storage.load_dataframe(path)
    samples = samples_from_frame(df, metric_keys)
    logger.info(f"Loaded {len(samples)} samples from {path}")
    return samples


def save_samples(samples: Sequence[Sample], path: str, storage: Optional[DataStorage] = None) -> None:
    storage = storage or storage_for_path(path)
    storage.save_dataframe(samples_to_frame(samples), path)


def save_transform_results(
    results: Mapping[str, TransformResult],
    path: str,
    extra: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Write per-metric transform results as one JSON document.

    Returns:
        The document written
    """
    document: Dict[str, Any] = dict(extra or {})
    document["metrics"] = {key: result.to_dict() for key, result in results.items()}
    create_storage("json").save_dict(document, path)
    logger.info(f"Saved transform results for {len(results)} metrics to {path}")
    return document
