"""
Primitive validators for config values and command-line arguments.

Each validator returns the value converted to its Python type or raises
ValidationError naming the offending field, e.g. "memory.warn_mb" or
"--width argument".
"""

from datetime import datetime
from typing import Any, Callable, List, Optional, Sequence, TypeVar, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .exceptions import ValidationError

Number = TypeVar("Number", int, float)


def _coerce_number(value: Any, convert: Callable[[Any], Number], kind: str, field_name: str) -> Number:
    # bool is an int subclass; TOML `true` must not pass as 1
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a valid {kind}, got {value}",
                              field_name=field_name, value=value)
    try:
        return convert(value)
    except (ValueError, TypeError):
        raise ValidationError(f"{field_name} must be a valid {kind}, got {value}",
                              field_name=field_name, value=value)


def _check_bounds(number: Union[int, float], raw: Any, min_value: Union[int, float],
                  max_value: Optional[Union[int, float]], field_name: str) -> None:
    if number < min_value:
        raise ValidationError(f"{field_name} must be >= {min_value}, got {number}",
                              field_name=field_name, value=raw)
    if max_value is not None and number > max_value:
        raise ValidationError(f"{field_name} must be <= {max_value}, got {number}",
                              field_name=field_name, value=raw)


def validate_positive_integer(
    value: Any,
    min_value: int = 1,
    max_value: Optional[int] = None,
    field_name: str = "value"
) -> int:
    """
    Convert value to an int within [min_value, max_value].

    Strings such as "42" (CLI arguments) are accepted; booleans are not.
    """
    number = _coerce_number(value, int, "integer", field_name)
    _check_bounds(number, value, min_value, max_value, field_name)
    return number


def validate_positive_float(
    value: Any,
    min_value: float = 0.0,
    max_value: Optional[float] = None,
    field_name: str = "value"
) -> float:
    """Convert value to a float within [min_value, max_value]."""
    number = _coerce_number(value, float, "number", field_name)
    _check_bounds(number, value, min_value, max_value, field_name)
    return number


def validate_enum_choice(
    value: Any,
    valid_choices: List[str],
    field_name: str = "value",
    case_sensitive: bool = False
) -> str:
    """
    Validate that a value is one of the allowed choices.

    Returns:
        The matching choice as spelled in valid_choices
    """
    if not isinstance(value, str):
        raise ValidationError(
            f"{field_name} must be a string, got {type(value).__name__}",
            field_name=field_name,
            value=value
        )

    for choice in valid_choices:
        if value == choice or (not case_sensitive and value.lower() == choice.lower()):
            return choice

    raise ValidationError(
        f"{field_name} must be one of {valid_choices}, got '{value}'",
        field_name=field_name,
        value=value
    )


def validate_ascending(
    values: Sequence[float],
    field_names: Sequence[str],
    strict: Sequence[bool]
) -> None:
    """
    Validate that a sequence of thresholds increases.

    strict[i] selects '<' (True) or '<=' (False) between values[i] and
    values[i + 1].
    """
    for i in range(len(values) - 1):
        left, right = values[i], values[i + 1]
        ok = left < right if strict[i] else left <= right
        if not ok:
            op = "<" if strict[i] else "<="
            raise ValidationError(
                f"{field_names[i]} ({left}) must be {op} {field_names[i + 1]} ({right})",
                field_name=field_names[i],
                value=left
            )


def validate_timezone(name: Any, field_name: str = "timezone") -> str:
    """Validate an IANA timezone name."""
    if not isinstance(name, str) or not name.strip():
        raise ValidationError(
            f"{field_name} must be a non-empty string",
            field_name=field_name,
            value=name
        )
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValidationError(
            f"{field_name} is not a known timezone: {name}",
            field_name=field_name,
            value=name
        )
    return name


def validate_iso_datetime(value: str, field_name: str = "datetime") -> datetime:
    """Parse an ISO-8601 date or datetime string."""
    try:
        return datetime.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValidationError(
            f"{field_name} must be an ISO-8601 date or datetime, got '{value}'",
            field_name=field_name,
            value=value
        )
