"""
Configuration data models.

This module contains the configuration-related data structures for chart
point budgets, label rendering, memory budget enforcement, and the root
application configuration.
"""

from dataclasses import dataclass, field
from typing import Dict

from .memory import MemoryBudget, SubsystemBudget


def default_subsystem_budgets() -> Dict[str, SubsystemBudget]:
    """Budgets for the caches the dashboard registers out of the box."""
    return {
        "remote-data": SubsystemBudget(max_entries=10, max_array_length=1000),
        "local-derived": SubsystemBudget(max_entries=20),
        "images": SubsystemBudget(max_entries=2),
    }


@dataclass
class GeneralConfig:
    """
    Settings from the `[general]` section of `config.toml`.
    """

    log_level: str = "INFO"


@dataclass
class ChartConfig:
    """
    Settings for the downsampling pipeline, loaded from `[chart]`.
    """

    # Surfaces narrower than this are in the narrow class.
    narrow_max_width: int = 768
    # Surfaces narrower than this (and not narrow) are in the medium class.
    medium_max_width: int = 1024
    narrow_budget: int = 400
    medium_budget: int = 600
    wide_budget: int = 1000
    # Points newer than this many days get relative labels ("3 hours ago").
    relative_label_days: int = 7
    # IANA zone used for absolute labels.
    display_timezone: str = "UTC"


@dataclass
class MemoryConfig:
    """
    Settings for the memory budget monitor and cleanup coordinator,
    loaded from `[memory]` and its `[memory.subsystems.*]` tables.
    """

    budget: MemoryBudget = field(default_factory=MemoryBudget)
    monitor_interval_seconds: float = 10.0
    sweep_interval_seconds: float = 30.0
    cleanup_throttle_seconds: float = 5.0
    emergency_recheck_seconds: float = 1.0
    history_limit: int = 60
    subsystems: Dict[str, SubsystemBudget] = field(default_factory=default_subsystem_budgets)


@dataclass
class AppConfig:
    """
    The root configuration object that aggregates all loaded settings.
    """

    general: GeneralConfig = field(default_factory=GeneralConfig)
    chart: ChartConfig = field(default_factory=ChartConfig)
    memory: MemoryConfig = field(default_factory=MemoryConfig)
