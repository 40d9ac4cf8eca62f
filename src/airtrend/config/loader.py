"""
Reading the airtrend TOML configuration document.

Parsing is kept apart from validation so that a malformed file fails with
the parser's own error (line and column) before any section is inspected.
"""

import logging
import tomllib
from pathlib import Path
from typing import Any, Dict, Iterable

from ..validation import ErrorSeverity, handle_config_error

logger = logging.getLogger(__name__)

KNOWN_SECTIONS = ("general", "chart", "memory")


def read_config_document(config_path: Path) -> Dict[str, Any]:
    """
    Parse config.toml into a plain dictionary.

    Raises:
        FileNotFoundError: If config_path does not exist
        tomllib.TOMLDecodeError: If the document is not valid TOML
    """
    config_path = Path(config_path)
    if not config_path.is_file():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    logger.info(f"Reading configuration from {config_path}")
    try:
        document = tomllib.loads(config_path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        handle_config_error(
            e,
            f"parsing {config_path.name}",
            severity=ErrorSeverity.CRITICAL,
            logger=logger,
        )
        raise

    report_unknown_sections(document)
    return document


def report_unknown_sections(document: Dict[str, Any], known: Iterable[str] = KNOWN_SECTIONS) -> list:
    """Warn about top-level tables airtrend does not read; returns their names."""
    unknown = sorted(key for key in document if key not in set(known))
    for name in unknown:
        logger.warning(f"Ignoring unknown configuration section [{name}]")
    return unknown
