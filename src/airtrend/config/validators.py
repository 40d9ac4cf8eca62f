"""
Configuration validation utilities.

This module provides specialized validation functions for each section of
the configuration file: general settings, chart budgets, and memory budgets.
"""

import logging
from typing import Any, Dict

from ..models.config import AppConfig, ChartConfig, GeneralConfig, MemoryConfig, default_subsystem_budgets
from ..models.memory import MemoryBudget, SubsystemBudget
from ..validation import (
    ValidationError,
    validate_ascending,
    validate_enum_choice,
    validate_positive_float,
    validate_positive_integer,
    validate_timezone,
)

logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def validate_general_config(general_data: Dict[str, Any]) -> GeneralConfig:
    """
    Validate and create a GeneralConfig from the `[general]` table.
    """
    log_level = validate_enum_choice(
        general_data.get("log_level", "INFO"),
        valid_choices=LOG_LEVELS,
        field_name="general.log_level",
    )
    return GeneralConfig(log_level=log_level)


def validate_chart_config(chart_data: Dict[str, Any]) -> ChartConfig:
    """
    Validate and create a ChartConfig from the `[chart]` table.

    Args:
        chart_data: Raw chart configuration from TOML

    Returns:
        Validated ChartConfig instance

    Raises:
        ValidationError: If validation fails
    """
    defaults = ChartConfig()

    narrow_max_width = validate_positive_integer(
        chart_data.get("narrow_max_width", defaults.narrow_max_width),
        min_value=1,
        max_value=100000,
        field_name="chart.narrow_max_width",
    )
    medium_max_width = validate_positive_integer(
        chart_data.get("medium_max_width", defaults.medium_max_width),
        min_value=1,
        max_value=100000,
        field_name="chart.medium_max_width",
    )
    validate_ascending(
        [narrow_max_width, medium_max_width],
        ["chart.narrow_max_width", "chart.medium_max_width"],
        strict=[True],
    )

    narrow_budget = validate_positive_integer(
        chart_data.get("narrow_budget", defaults.narrow_budget),
        min_value=1,
        max_value=1000000,
        field_name="chart.narrow_budget",
    )
    medium_budget = validate_positive_integer(
        chart_data.get("medium_budget", defaults.medium_budget),
        min_value=1,
        max_value=1000000,
        field_name="chart.medium_budget",
    )
    wide_budget = validate_positive_integer(
        chart_data.get("wide_budget", defaults.wide_budget),
        min_value=1,
        max_value=1000000,
        field_name="chart.wide_budget",
    )
    # Budgets must not shrink as the surface grows.
    validate_ascending(
        [narrow_budget, medium_budget, wide_budget],
        ["chart.narrow_budget", "chart.medium_budget", "chart.wide_budget"],
        strict=[False, False],
    )

    relative_label_days = validate_positive_integer(
        chart_data.get("relative_label_days", defaults.relative_label_days),
        min_value=0,
        max_value=3650,
        field_name="chart.relative_label_days",
    )
    display_timezone = validate_timezone(
        chart_data.get("display_timezone", defaults.display_timezone),
        field_name="chart.display_timezone",
    )

    return ChartConfig(
        narrow_max_width=narrow_max_width,
        medium_max_width=medium_max_width,
        narrow_budget=narrow_budget,
        medium_budget=medium_budget,
        wide_budget=wide_budget,
        relative_label_days=relative_label_days,
        display_timezone=display_timezone,
    )


def validate_subsystem_budget(name: str, budget_data: Any) -> SubsystemBudget:
    """
    Validate one `[memory.subsystems.<name>]` table.
    """
    if not isinstance(budget_data, dict):
        raise ValidationError(
            f"memory.subsystems.{name} must be a table",
            field_name=f"memory.subsystems.{name}",
            value=budget_data,
        )

    max_entries = budget_data.get("max_entries")
    if max_entries is not None:
        max_entries = validate_positive_integer(
            max_entries,
            min_value=0,
            field_name=f"memory.subsystems.{name}.max_entries",
        )

    max_array_length = budget_data.get("max_array_length")
    if max_array_length is not None:
        max_array_length = validate_positive_integer(
            max_array_length,
            min_value=0,
            field_name=f"memory.subsystems.{name}.max_array_length",
        )

    return SubsystemBudget(max_entries=max_entries, max_array_length=max_array_length)


def validate_memory_config(memory_data: Dict[str, Any]) -> MemoryConfig:
    """
    Validate and create a MemoryConfig from the `[memory]` table.

    Args:
        memory_data: Raw memory configuration from TOML

    Returns:
        Validated MemoryConfig instance

    Raises:
        ValidationError: If validation fails
    """
    defaults = MemoryConfig()
    default_budget = defaults.budget

    thresholds = []
    for key, default in (
        ("warn_mb", default_budget.warn_mb),
        ("critical_mb", default_budget.critical_mb),
        ("emergency_mb", default_budget.emergency_mb),
        ("hard_max_mb", default_budget.hard_max_mb),
    ):
        thresholds.append(
            validate_positive_float(
                memory_data.get(key, default),
                min_value=1.0,
                max_value=1048576.0,  # 1 TB
                field_name=f"memory.{key}",
            )
        )

    validate_ascending(
        thresholds,
        ["memory.warn_mb", "memory.critical_mb", "memory.emergency_mb", "memory.hard_max_mb"],
        strict=[True, True, False],
    )
    warn_mb, critical_mb, emergency_mb, hard_max_mb = thresholds

    monitor_interval_seconds = validate_positive_float(
        memory_data.get("monitor_interval_seconds", defaults.monitor_interval_seconds),
        min_value=0.1,
        max_value=3600.0,
        field_name="memory.monitor_interval_seconds",
    )
    sweep_interval_seconds = validate_positive_float(
        memory_data.get("sweep_interval_seconds", defaults.sweep_interval_seconds),
        min_value=0.1,
        max_value=3600.0,
        field_name="memory.sweep_interval_seconds",
    )
    cleanup_throttle_seconds = validate_positive_float(
        memory_data.get("cleanup_throttle_seconds", defaults.cleanup_throttle_seconds),
        min_value=0.0,
        max_value=600.0,
        field_name="memory.cleanup_throttle_seconds",
    )
    emergency_recheck_seconds = validate_positive_float(
        memory_data.get("emergency_recheck_seconds", defaults.emergency_recheck_seconds),
        min_value=0.0,
        max_value=600.0,
        field_name="memory.emergency_recheck_seconds",
    )
    history_limit = validate_positive_integer(
        memory_data.get("history_limit", defaults.history_limit),
        min_value=1,
        max_value=100000,
        field_name="memory.history_limit",
    )

    subsystems_data = memory_data.get("subsystems")
    if subsystems_data is None:
        subsystems = default_subsystem_budgets()
    else:
        if not isinstance(subsystems_data, dict):
            raise ValidationError(
                "memory.subsystems must be a table of named cache budgets",
                field_name="memory.subsystems",
                value=subsystems_data,
            )
        subsystems = {
            name: validate_subsystem_budget(name, budget_data)
            for name, budget_data in subsystems_data.items()
        }

    return MemoryConfig(
        budget=MemoryBudget(
            warn_mb=warn_mb,
            critical_mb=critical_mb,
            emergency_mb=emergency_mb,
            hard_max_mb=hard_max_mb,
        ),
        monitor_interval_seconds=monitor_interval_seconds,
        sweep_interval_seconds=sweep_interval_seconds,
        cleanup_throttle_seconds=cleanup_throttle_seconds,
        emergency_recheck_seconds=emergency_recheck_seconds,
        history_limit=history_limit,
        subsystems=subsystems,
    )


def validate_app_config(config_data: Dict[str, Any]) -> AppConfig:
    """
    Validate the whole parsed configuration file.
    """
    for section in ("general", "chart", "memory"):
        value = config_data.get(section, {})
        if not isinstance(value, dict):
            raise ValidationError(
                f"[{section}] must be a table",
                field_name=section,
                value=value,
            )

    return AppConfig(
        general=validate_general_config(config_data.get("general", {})),
        chart=validate_chart_config(config_data.get("chart", {})),
        memory=validate_memory_config(config_data.get("memory", {})),
    )
