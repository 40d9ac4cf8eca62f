"""
Storage interface for sample tables and result documents.

A backend decides how a sample table is laid out on disk (Parquet
columns, JSON rows). Result documents are always JSON, whatever the
backend, so that part is implemented here once.
"""

import json
import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

import polars as pl

logger = logging.getLogger(__name__)


@contextmanager
def reporting_failures(action: str, path: str) -> Iterator[None]:
    """Log an I/O failure with its path, then let it propagate."""
    try:
        yield
    except Exception as e:
        logger.error(f"Failed to {action} {path}: {e}")
        raise


class DataStorage(ABC):
    """A file format for sample tables."""

    format_name = "abstract"

    @abstractmethod
    def save_dataframe(self, df: pl.DataFrame, path: str) -> None:
        """Write a sample table, creating parent directories as needed."""

    @abstractmethod
    def load_dataframe(self, path: str, columns: Optional[List[str]] = None) -> pl.DataFrame:
        """
        Read a sample table.

        Args:
            path: File to read
            columns: Only these columns, if given
        """

    def save_dict(self, data: Dict[str, Any], path: str) -> None:
        with reporting_failures("write document", path):
            target = Path(path)
            target.parent.mkdir(parents=True, exist_ok=True)
            # datetimes in transform output serialize as ISO strings
            target.write_text(
                json.dumps(data, indent=2, ensure_ascii=False, default=str), encoding="utf-8"
            )
        logger.debug(f"Wrote JSON document to {path}")

    def load_dict(self, path: str) -> Dict[str, Any]:
        with reporting_failures("read document", path):
            return json.loads(Path(path).read_text(encoding="utf-8"))

    def file_exists(self, path: str) -> bool:
        return Path(path).is_file()
