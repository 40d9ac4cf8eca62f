"""
Error types and error reporting helpers.

Configuration files and command-line arguments fail with ValidationError.
Everything else is reported through handle_error(), which logs at a
chosen severity and re-raises unless told not to. Cleanup of one cache
uses reraise=False so a failure there never stops cleanup of the others.
"""

import logging
import sys
from enum import Enum
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)


class ErrorSeverity(Enum):
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

    @property
    def log_level(self) -> int:
        return getattr(logging, self.name)


class ValidationError(Exception):
    """
    A configuration value or CLI argument was rejected.

    Attributes:
        field_name: Dotted config key or argument name, e.g. "memory.warn_mb"
        value: The rejected value
        severity: How loudly handlers should report it
    """

    def __init__(self, message: str, field_name: Optional[str] = None,
                 value: Any = None, severity: ErrorSeverity = ErrorSeverity.ERROR):
        super().__init__(message)
        self.field_name = field_name
        self.value = value
        self.severity = severity


def _as_severity(severity: Union[ErrorSeverity, str]) -> ErrorSeverity:
    if isinstance(severity, ErrorSeverity):
        return severity
    return ErrorSeverity(severity.lower())


def handle_error(
    error: Exception,
    context: str,
    severity: Union[ErrorSeverity, str] = ErrorSeverity.ERROR,
    reraise: bool = True,
    logger: Optional[logging.Logger] = None,
) -> None:
    """
    Log ``error`` as "Error in <context>: <error>" and optionally re-raise it.

    Tracebacks are attached at debug and critical severity only.
    """
    level = _as_severity(severity)
    target = logger or logging.getLogger(__name__)
    target.log(
        level.log_level,
        f"Error in {context}: {error}",
        exc_info=level in (ErrorSeverity.DEBUG, ErrorSeverity.CRITICAL),
    )
    if reraise:
        raise error


def handle_config_error(error: Exception, context: str, **kwargs) -> None:
    handle_error(error, f"config {context}", **kwargs)


def handle_cli_error(
    error: Exception,
    context: str,
    exit_code: int = 1,
    include_traceback: bool = False,
    logger: Optional[logging.Logger] = None,
) -> None:
    """Report a fatal CLI error and exit with exit_code."""
    severity = ErrorSeverity.CRITICAL if include_traceback else ErrorSeverity.ERROR
    handle_error(error, f"CLI {context}", severity=severity, reraise=False, logger=logger)
    sys.exit(exit_code)
