"""
raml-mock Common Utilities

Shared helpers for value serialization.
"""

import json
from typing import Any


_NOT_JSON = object()


def safe_json_parse(json_string: str, default: Any = None) -> Any:
    """
    Safely parse JSON string with error handling.

    Args:
        json_string: JSON string to parse
        default: Default value to return if parsing fails

    Returns:
        Parsed JSON object, or default if parsing fails

    Example:
        body = safe_json_parse('{"success": true}', default={})
    """
    if not json_string:
        return default

    try:
        return json.loads(json_string)
    except (json.JSONDecodeError, TypeError, ValueError):
        return default


def is_json_document(text: str) -> bool:
    """Check whether a string already holds a JSON document."""
    return safe_json_parse(text, default=_NOT_JSON) is not _NOT_JSON


def to_json(value: Any) -> str:
    """
    Serialize a value to compact JSON.

    Booleans, numbers and null keep their JSON literal forms, so a bare
    ``True`` becomes ``true``.
    """
    return json.dumps(value, separators=(',', ':'), ensure_ascii=False, default=str)


def stringify_value(value: Any) -> str:
    """
    Render a selected value as a header string.

    Args:
        value: Selected example value

    Returns:
        String form: strings verbatim, JSON literal form for everything else
    """
    if isinstance(value, str):
        return value
    return to_json(value)
