from __future__ import annotations

from typing import Any, Mapping

from ..core.exceptions import ValidationError


def require_field(payload: Mapping[str, Any], field_name: str) -> str:
    """Return a required request field as text. Values are not trimmed."""
    value = payload.get(field_name)
    if value is None or value == "":
        raise ValidationError(f"Missing field: {field_name}")
    return str(value)


def optional_field(payload: Mapping[str, Any], field_name: str) -> str:
    value = payload.get(field_name)
    return "" if value is None else str(value)


def require_value(payload: Mapping[str, Any], field_name: str) -> Any:
    """Like ``require_field`` but returns the JSON value untouched (no ``str()``)."""
    value = payload.get(field_name)
    if value is None or value == "":
        raise ValidationError(f"Missing field: {field_name}")
    return value
