"""
Diagnostics sinks.

Components that emit debugging events receive a sink explicitly; the
default sink discards everything.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional


class DiagnosticsSink(ABC):
    """Receives named diagnostic events with keyword fields."""

    @abstractmethod
    def record(self, event: str, **fields: Any) -> None:
        pass


class NullDiagnostics(DiagnosticsSink):
    def record(self, event: str, **fields: Any) -> None:
        return None


class LoggingDiagnostics(DiagnosticsSink):
    """Forwards diagnostic events to a logger."""

    def __init__(self, logger: Optional[logging.Logger] = None, level: int = logging.DEBUG):
        self.logger = logger or logging.getLogger("airtrend.diagnostics")
        self.level = level

    def record(self, event: str, **fields: Any) -> None:
        details = " ".join(f"{key}={value}" for key, value in sorted(fields.items()))
        self.logger.log(self.level, f"[{event}] {details}")
