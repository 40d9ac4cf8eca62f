"""
Pytest configuration and shared fixtures for the airtrend test suite.

This module provides common fixtures, test utilities, and configuration
for all test modules in the airtrend project.
"""

import shutil
import sys
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import pytest

# Add src to Python path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


# ============================================================================
# Test Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


# Fixed reference instant used across time-dependent tests.
NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


# ============================================================================
# Core Fixtures
# ============================================================================


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def sample_config_data():
    """Sample configuration data for testing."""
    return {
        "general": {"log_level": "DEBUG"},
        "chart": {
            "narrow_max_width": 600,
            "medium_max_width": 1200,
            "narrow_budget": 200,
            "medium_budget": 500,
            "wide_budget": 800,
            "relative_label_days": 3,
            "display_timezone": "Europe/Berlin",
        },
        "memory": {
            "warn_mb": 100,
            "critical_mb": 200,
            "emergency_mb": 300,
            "hard_max_mb": 400,
            "monitor_interval_seconds": 15,
            "sweep_interval_seconds": 60,
            "cleanup_throttle_seconds": 10,
            "emergency_recheck_seconds": 2,
            "history_limit": 30,
            "subsystems": {
                "remote-data": {"max_entries": 5, "max_array_length": 500},
                "thumbnails": {"max_entries": 3},
            },
        },
    }


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def config_files(temp_dir, sample_config_data):
    """Create temporary configuration files for testing."""
    import toml

    config_file = temp_dir / "config.toml"
    with open(config_file, "w") as f:
        toml.dump(sample_config_data, f)

    return {"config": config_file, "dir": temp_dir}


@pytest.fixture(autouse=True)
def clear_config_after_test():
    """Automatically clear configuration cache after each test."""
    original_config_path = Path(__file__).parent.parent / "conf" / "config.toml"

    yield

    from airtrend.config import clear_config_cache, set_config_path

    clear_config_cache()
    set_config_path(original_config_path)


# ============================================================================
# Test Utilities
# ============================================================================


class ScriptedProbe:
    """Memory probe returning readings from a script, repeating the last one."""

    def __init__(self, readings: Sequence[Optional[float]]):
        self.readings = list(readings)
        self.calls = 0

    def read_usage_mb(self) -> Optional[float]:
        index = min(self.calls, len(self.readings) - 1)
        self.calls += 1
        return self.readings[index]

    def set(self, *readings: Optional[float]) -> None:
        self.readings = list(readings)
        self.calls = 0


class TestUtils:
    """Utility functions for testing."""

    @staticmethod
    def make_sample(timestamp: datetime, location_label: str = "Station A", source_id=None, **metrics):
        from airtrend.models import Sample

        return Sample(
            timestamp=timestamp,
            metric_values=metrics,
            location_label=location_label,
            source_id=source_id,
        )

    @staticmethod
    def make_series(
        start: datetime,
        count: int,
        step: timedelta,
        metric_key: str = "aqi",
        value_func=None,
    ) -> List:
        """Evenly spaced samples; value_func(i) defaults to i."""
        from airtrend.models import Sample

        value_func = value_func or (lambda i: float(i))
        return [
            Sample(
                timestamp=start + i * step,
                metric_values={metric_key: value_func(i)},
                location_label="Station A",
                source_id=i,
            )
            for i in range(count)
        ]

    @staticmethod
    def make_registry(budgets: Dict[str, "object"], scheduler=None):
        from airtrend.memory import CacheRegistry

        clock = scheduler.now if scheduler is not None else None
        return CacheRegistry.from_budgets(budgets, clock=clock)


@pytest.fixture
def test_utils():
    """Provide test utility functions."""
    return TestUtils


@pytest.fixture
def manual_scheduler():
    from airtrend.memory import ManualScheduler

    return ManualScheduler()


@pytest.fixture
def scripted_probe():
    return ScriptedProbe([None])
