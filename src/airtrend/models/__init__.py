"""
Data models and structures for the chart pipeline and memory budgeting.

This module provides the data models used throughout the application,
organized by their functional purpose:

Configuration Models:
- Application-wide settings
- Chart point budgets and label rendering
- Memory thresholds and per-cache budgets

Series Models:
- Raw samples as delivered by the data-fetch layer
- Range selectors and resolved time windows
- Chart points and transform results with provenance

Memory Models:
- Budget classifications
- Usage readings and cleanup reports

All models are dataclasses or enums with type hints.
"""

# Configuration models
from .config import (
    AppConfig,
    ChartConfig,
    GeneralConfig,
    MemoryConfig,
    default_subsystem_budgets,
)

# Series models
from .series import (
    EPOCH_ORIGIN,
    ChartPoint,
    MetricSpec,
    RangeKind,
    RangeSelector,
    Sample,
    TimeWindow,
    TransformMeta,
    TransformResult,
    ensure_utc,
)

# Memory models
from .memory import (
    BudgetState,
    CleanupReport,
    MemoryBudget,
    MemoryUsage,
    SubsystemBudget,
)

__all__ = [
    # Configuration
    "AppConfig",
    "ChartConfig",
    "GeneralConfig",
    "MemoryConfig",
    "default_subsystem_budgets",
    # Series
    "EPOCH_ORIGIN",
    "ChartPoint",
    "MetricSpec",
    "RangeKind",
    "RangeSelector",
    "Sample",
    "TimeWindow",
    "TransformMeta",
    "TransformResult",
    "ensure_utc",
    # Memory
    "BudgetState",
    "CleanupReport",
    "MemoryBudget",
    "MemoryUsage",
    "SubsystemBudget",
]
