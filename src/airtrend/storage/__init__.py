"""
Storage for sample files and transform output.

Sample tables are read and written through Polars as Parquet or JSON;
transform results are written as JSON documents.
"""

from .base import DataStorage
from .factory import create_storage, detect_format, storage_for_path
from .parquet_storage import JsonStorage, ParquetStorage
from .samples import (
    load_samples,
    parse_timestamp,
    samples_from_frame,
    samples_to_frame,
    save_samples,
    save_transform_results,
)

__all__ = [
    "DataStorage",
    "JsonStorage",
    "ParquetStorage",
    "create_storage",
    "detect_format",
    "storage_for_path",
    "load_samples",
    "parse_timestamp",
    "samples_from_frame",
    "samples_to_frame",
    "save_samples",
    "save_transform_results",
]
