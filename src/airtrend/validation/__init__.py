"""
Validation and error reporting for airtrend.

ValidationError and the primitive validators guard configuration and
command-line input; handle_error() is the shared way to log a failure
and decide whether it propagates.
"""

# Core exception classes and error handling
from .exceptions import (
    ErrorSeverity,
    ValidationError,
    handle_error,
    handle_config_error,
    handle_cli_error,
)

# Validation functions
from .validators import (
    validate_ascending,
    validate_enum_choice,
    validate_iso_datetime,
    validate_positive_float,
    validate_positive_integer,
    validate_timezone,
)

__all__ = [
    # Core functionality
    "ErrorSeverity",
    "ValidationError",
    "handle_error",
    "handle_config_error",
    "handle_cli_error",
    # Validators
    "validate_ascending",
    "validate_enum_choice",
    "validate_iso_datetime",
    "validate_positive_float",
    "validate_positive_integer",
    "validate_timezone",
]
