"""
Choosing a sample table backend by name or by file suffix.
"""

import logging
from pathlib import Path
from typing import Literal

from .base import DataStorage
from .parquet_storage import Compression, JsonStorage, ParquetStorage

logger = logging.getLogger(__name__)

StorageFormat = Literal["parquet", "json"]

_SUFFIX_FORMATS = {
    ".parquet": "parquet",
    ".pq": "parquet",
    ".json": "json",
}


def detect_format(path: str) -> StorageFormat:
    """
    Storage format implied by a file suffix.

    Raises:
        ValueError: If the suffix is not a supported format
    """
    suffix = Path(path).suffix.lower()
    try:
        return _SUFFIX_FORMATS[suffix]
    except KeyError:
        raise ValueError(
            f"Cannot infer storage format from '{path}'; expected one of {sorted(_SUFFIX_FORMATS)}"
        ) from None


def create_storage(
    format_type: StorageFormat = "parquet",
    compression: Compression = "snappy",
) -> DataStorage:
    """
    Backend for format_type; compression applies to Parquet only.

    Raises:
        ValueError: If format_type is not 'parquet' or 'json'
    """
    if format_type == "parquet":
        return ParquetStorage(compression=compression)
    if format_type == "json":
        return JsonStorage()
    raise ValueError(f"Unsupported storage format: {format_type}")


def storage_for_path(path: str) -> DataStorage:
    storage = create_storage(detect_format(path))
    logger.debug(f"Using {storage.format_name} storage for {path}")
    return storage
