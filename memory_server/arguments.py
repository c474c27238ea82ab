"""
Validation of loosely typed tool arguments.

Tool callers send counts as JSON numbers or as strings. Everything is
funnelled through :func:`parse_count` so each tool accepts the same shapes
and fails with the same error.
"""

import math
import re
from typing import Any, Optional


_INTEGER_TEXT = re.compile(r"^[+-]?\d+$")


class ArgumentError(ValueError):
    """A tool argument is missing or has an unusable value."""


def parse_count(value: Any, name: str) -> int:
    """
    Convert a count argument to a non-negative int.

    Accepted shapes:
        - int (bool is rejected)
        - finite float, truncated toward zero
        - str of optional sign and decimal digits, surrounding blanks ignored

    Raises:
        ArgumentError: For a missing value, another type, unparsable text,
            or a negative result.
    """
    if value is None:
        raise ArgumentError(f"missing required parameter '{name}'")

    if isinstance(value, bool):
        raise ArgumentError(f"parameter '{name}' must be an integer")
    if isinstance(value, int):
        count = value
    elif isinstance(value, float):
        if not math.isfinite(value):
            raise ArgumentError(f"parameter '{name}' must be a finite number")
        count = int(value)
    elif isinstance(value, str):
        text = value.strip()
        if not _INTEGER_TEXT.match(text):
            raise ArgumentError(f"parameter '{name}' must be a valid integer")
        count = int(text)
    else:
        raise ArgumentError(f"parameter '{name}' must be an integer")

    if count < 0:
        raise ArgumentError(f"parameter '{name}' must not be negative")
    return count


def require_string(value: Any, name: str) -> str:
    """Return ``value`` if it is a string, blank or not."""
    if value is None:
        raise ArgumentError(f"missing required parameter '{name}'")
    if not isinstance(value, str):
        raise ArgumentError(f"parameter '{name}' must be a string")
    return value


def require_text(value: Any, name: str) -> str:
    """Return ``value`` if it is a non-empty string."""
    if not require_string(value, name).strip():
        raise ArgumentError(f"parameter '{name}' must not be empty")
    return value


def optional_text(value: Any, default: Optional[str] = None) -> Optional[str]:
    """Labels are kept verbatim; empty or non-string ones fall back to ``default``."""
    if isinstance(value, str) and value:
        return value
    return default
