"""Normalization of query, form and header values."""

from __future__ import annotations

from typing import Any, Mapping


def normalize_value(value: Any) -> Any:
    """Return the canonical query/form representation of ``value``.

    Booleans become the literal strings ``"true"`` and ``"false"``; every
    other value passes through unchanged.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


def normalize_params(params: Mapping[str, Any]) -> dict[str, Any]:
    """Normalize every value of ``params``."""
    return {key: normalize_value(value) for key, value in params.items()}


def header_value(value: Any) -> str | bytes:
    """Return ``value`` in a form requests accepts as a header value."""
    value = normalize_value(value)
    if isinstance(value, (str, bytes)):
        return value
    return str(value)
