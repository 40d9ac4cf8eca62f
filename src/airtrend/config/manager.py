"""
Process-wide access to the airtrend configuration.

The configuration is read once and shared: chart budgets and memory
thresholds are fixed for the life of the process. Tests and the CLI
``--config`` option point the loader at another file with
set_config_path(), which also drops the cached copy.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from ..models.config import AppConfig
from .loader import read_config_document
from .validators import validate_app_config

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[3] / "conf" / "config.toml"

_config: Optional[AppConfig] = None
_config_path: Path = DEFAULT_CONFIG_PATH


def set_config_path(config_path: Path) -> None:
    """Use config_path for the next get_config() and forget the cached config."""
    global _config, _config_path
    _config_path = Path(config_path)
    _config = None
    logger.info(f"Configuration path set to {_config_path}")


def get_config_path() -> Path:
    return _config_path


def clear_config_cache() -> None:
    global _config
    _config = None
    logger.debug("Configuration cache cleared")


def is_config_loaded() -> bool:
    return _config is not None


def get_config() -> AppConfig:
    """
    Return the shared AppConfig, reading and validating it on first use.

    Raises:
        FileNotFoundError: If the configuration file is missing
        ValidationError: If a value is out of range or thresholds are misordered
        tomllib.TOMLDecodeError: If the file is not valid TOML
    """
    global _config
    if _config is None:
        app_config = validate_app_config(read_config_document(_config_path))
        budget = app_config.memory.budget
        logger.info(
            f"Configuration loaded: chart budgets {app_config.chart.narrow_budget}/"
            f"{app_config.chart.medium_budget}/{app_config.chart.wide_budget} points, memory "
            f"thresholds {budget.warn_mb}/{budget.critical_mb}/{budget.emergency_mb}MB, "
            f"{len(app_config.memory.subsystems)} cache budgets"
        )
        _config = app_config
    return _config


def get_config_info() -> Dict[str, Any]:
    """Summary of the configuration state, for diagnostics output."""
    info: Dict[str, Any] = {
        "config_loaded": _config is not None,
        "config_path": str(_config_path),
        "subsystems_count": len(_config.memory.subsystems) if _config else 0,
    }
    if _config is not None:
        info["display_timezone"] = _config.chart.display_timezone
        info["hard_max_mb"] = _config.memory.budget.hard_max_mb
    return info
