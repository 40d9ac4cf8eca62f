"""
Configuration for airtrend.

``get_config()`` returns the validated contents of ``conf/config.toml``
(chart point budgets, memory thresholds and per-cache budgets), read once
per process.
"""

from .loader import KNOWN_SECTIONS, read_config_document, report_unknown_sections
from .manager import (
    DEFAULT_CONFIG_PATH,
    clear_config_cache,
    get_config,
    get_config_info,
    get_config_path,
    is_config_loaded,
    set_config_path,
)
from .validators import (
    LOG_LEVELS,
    validate_app_config,
    validate_chart_config,
    validate_general_config,
    validate_memory_config,
    validate_subsystem_budget,
)

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "get_config",
    "get_config_path",
    "set_config_path",
    "clear_config_cache",
    "is_config_loaded",
    "get_config_info",
    "KNOWN_SECTIONS",
    "read_config_document",
    "report_unknown_sections",
    "LOG_LEVELS",
    "validate_app_config",
    "validate_chart_config",
    "validate_general_config",
    "validate_memory_config",
    "validate_subsystem_budget",
]
