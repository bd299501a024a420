"""Typed access to request payload fields."""

from __future__ import annotations

from typing import Any, TypeVar

from skinmanager.utils.exceptions import ValidationError

from .envelope import MessageRequest

T = TypeVar("T")


def _payload_dict(request: MessageRequest) -> dict[str, Any]:
    payload = request.payload
    return payload if isinstance(payload, dict) else {}


def get_required_value(request: MessageRequest, key: str, expected: type[T] | None = None) -> T:
    """Return payload[key], raising ValidationError when missing or mistyped."""
    payload = _payload_dict(request)
    value = payload.get(key)
    if value is None:
        raise ValidationError(f"Missing required payload parameter: {key}", field=key)
    if expected is not None and not isinstance(value, expected):
        raise ValidationError(
            f"Payload parameter '{key}' must be {expected.__name__}, got {type(value).__name__}",
            field=key,
        )
    return value


def get_optional_value(request: MessageRequest, key: str, default: T | None = None) -> T | None:
    payload = _payload_dict(request)
    value = payload.get(key)
    return default if value is None else value


def get_required_string(request: MessageRequest, key: str) -> str:
    """Like get_required_value but also rejects blank strings."""
    value = get_required_value(request, key, str)
    if not value.strip():
        raise ValidationError(f"Missing required payload parameter: {key}", field=key)
    return value.strip()
