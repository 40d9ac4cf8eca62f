"""
Unit tests for memory probes and diagnostics sinks.
"""

import logging
from unittest.mock import Mock, patch

import psutil
import pytest

from airtrend.memory import LoggingDiagnostics, NullDiagnostics, NullMemoryProbe, PsutilMemoryProbe
from airtrend.memory.probes import MB


@pytest.mark.unit
class TestPsutilMemoryProbe:
    """Test cases for PsutilMemoryProbe."""

    def test_reads_rss_in_mb(self):
        with patch("psutil.Process") as mock_process_class:
            mock_process = Mock()
            mock_process.memory_info.return_value = Mock(rss=96 * MB)
            mock_process_class.return_value = mock_process

            probe = PsutilMemoryProbe(pid=4242)
            assert probe.read_usage_mb() == 96.0
            assert probe.read_usage_mb() == 96.0

            mock_process_class.assert_called_once_with(4242)

    @pytest.mark.parametrize(
        "error",
        [psutil.NoSuchProcess(4242), psutil.AccessDenied(4242), psutil.ZombieProcess(4242)],
    )
    def test_unavailable_process_degrades_to_none(self, error, caplog):
        with patch("psutil.Process", side_effect=error):
            probe = PsutilMemoryProbe(pid=4242)
            with caplog.at_level(logging.WARNING):
                assert probe.read_usage_mb() is None
                assert probe.read_usage_mb() is None
        # Logged once, not on every tick.
        assert len([r for r in caplog.records if "unavailable" in r.getMessage()]) == 1

    def test_defaults_to_current_process(self):
        probe = PsutilMemoryProbe()
        usage = probe.read_usage_mb()
        assert usage is not None and usage > 0

    def test_null_probe(self):
        assert NullMemoryProbe().read_usage_mb() is None


@pytest.mark.unit
class TestDiagnostics:
    """Test cases for diagnostics sinks."""

    def test_null_sink_discards(self):
        assert NullDiagnostics().record("cleanup", severity="warn") is None

    def test_logging_sink(self, caplog):
        sink = LoggingDiagnostics(level=logging.INFO)
        with caplog.at_level(logging.INFO, logger="airtrend.diagnostics"):
            sink.record("cleanup", severity="warn", evicted=3)
        assert "[cleanup] evicted=3 severity=warn" in caplog.text
