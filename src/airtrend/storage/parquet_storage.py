"""
Sample table backends built on Polars: Parquet columns or JSON rows.
"""

import logging
from pathlib import Path
from typing import List, Literal, Optional

import polars as pl

from .base import DataStorage, reporting_failures

logger = logging.getLogger(__name__)

Compression = Literal["snappy", "gzip", "brotli", "lz4", "zstd"]


class ParquetStorage(DataStorage):
    """Columnar sample files; the preferred format for long histories."""

    format_name = "parquet"

    def __init__(self, compression: Compression = "snappy"):
        self.compression = compression

    def save_dataframe(self, df: pl.DataFrame, path: str) -> None:
        with reporting_failures("write sample table", path):
            Path(path).parent.mkdir(parents=True, exist_ok=True)
            df.write_parquet(path, compression=self.compression)
        logger.debug(f"Wrote {df.height} samples to {path} ({self.compression})")

    def load_dataframe(self, path: str, columns: Optional[List[str]] = None) -> pl.DataFrame:
        with reporting_failures("read sample table", path):
            df = pl.read_parquet(path, columns=columns or None)
        logger.debug(f"Read {df.height} samples from {path}")
        return df


class JsonStorage(DataStorage):
    """
    Row-oriented sample files: ``{"samples": [{"timestamp": ..., "aqi": ...}, ...]}``.

    A bare top-level list of rows is accepted on read.
    """

    format_name = "json"
    ROWS_KEY = "samples"

    def save_dataframe(self, df: pl.DataFrame, path: str) -> None:
        self.save_dict({self.ROWS_KEY: df.to_dicts()}, path)

    def load_dataframe(self, path: str, columns: Optional[List[str]] = None) -> pl.DataFrame:
        document = self.load_dict(path)
        rows = document.get(self.ROWS_KEY, []) if isinstance(document, dict) else document
        # rows from different stations may carry different metric columns
        df = pl.DataFrame(rows, infer_schema_length=None)
        if columns:
            df = df.select([name for name in columns if name in df.columns])
        logger.debug(f"Read {df.height} samples from {path}")
        return df
