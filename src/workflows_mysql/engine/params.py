"""Parameter marshaling for node fields.

Query and WHERE parameters are entered as comma-separated strings. They
are split on "," and each token is trimmed; values stay strings and are
never coerced to numbers (MySQL converts them on comparison).

A literal comma cannot be expressed inside a value: there is no quoting or
escaping syntax.
"""

from __future__ import annotations

import json
from typing import Any

from .exceptions import ValidationError


def split_params(value: str | None) -> list[str]:
    """Split a comma-separated parameter string.

    Args:
        value: Parameter string (e.g. "123, active")

    Returns:
        List of trimmed string tokens (e.g. ["123", "active"]); empty list
        for an empty or missing string

    Example:
        >>> split_params("123, active")
        ['123', 'active']
        >>> split_params("")
        []
    """
    if not value:
        return []
    return [token.strip() for token in value.split(",")]


def parse_json_data(value: str | dict[str, Any] | None) -> dict[str, Any]:
    """Parse the JSON "data" field of insert and update.

    Args:
        value: JSON object text, or an already-parsed dict

    Returns:
        Parsed object, keys in document order

    Raises:
        ValidationError: If the text is not valid JSON or is not an object
    """
    if value is None or value == "":
        return {}

    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Invalid JSON data: {e}") from e

    if not isinstance(value, dict):
        raise ValidationError(f"Data must be a JSON object, got {type(value).__name__}")

    return value
