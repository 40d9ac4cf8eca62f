"""
airtrend: bounded chart series and memory budgeting for air quality dashboards.

The package is organized into specialized modules:
- config: Configuration management and validation
- models: Data structures and type definitions
- validation: Input validation and error handling
- series: Time window resolution, point budgets, binning and labels
- memory: Memory budget monitor, cleanup coordinator and named caches
- storage: Sample file loading and transform output
- cli: Command-line interface

Usage:
    From command line:
        airtrend transform samples.parquet --metrics aqi,pm25 --range 30d --width 900
        airtrend watch --duration 60

    Programmatically:
        from airtrend import SeriesTransformer, RangeSelector, RangeKind
        transformer = SeriesTransformer.from_config()
        result = transformer.transform(samples, RangeSelector(RangeKind.LAST_7D), "aqi")
"""

__version__ = "0.1.0"

# Main interfaces
from .config import clear_config_cache, get_config, set_config_path
from .memory import CleanupCoordinator, MemoryBudgetMonitor
from .series import BinningEngine, SeriesTransformer, resolve_window, select_point_budget

# Model classes for external use
from .models import (
    AppConfig,
    BudgetState,
    ChartPoint,
    MemoryBudget,
    RangeKind,
    RangeSelector,
    Sample,
    SubsystemBudget,
    TimeWindow,
    TransformResult,
)

__all__ = [
    "__version__",
    # Configuration
    "get_config",
    "set_config_path",
    "clear_config_cache",
    # Series
    "BinningEngine",
    "SeriesTransformer",
    "resolve_window",
    "select_point_budget",
    # Memory
    "CleanupCoordinator",
    "MemoryBudgetMonitor",
    # Models
    "AppConfig",
    "BudgetState",
    "ChartPoint",
    "MemoryBudget",
    "RangeKind",
    "RangeSelector",
    "Sample",
    "SubsystemBudget",
    "TimeWindow",
    "TransformResult",
]
