"""Case-insensitive merging of header and option mappings."""

from __future__ import annotations

from typing import Mapping, TypeVar

Value = TypeVar("Value")


def merge_options(
    base: Mapping[str, Value], override: Mapping[str, Value]
) -> dict[str, Value]:
    """Merge ``override`` on top of ``base`` ignoring key case.

    Any ``base`` key whose lowercase form also appears in ``override`` is
    dropped, so the result never holds two spellings of the same key. The
    surviving entry keeps the casing used by ``override``.
    """
    overridden = {str(key).lower() for key in override}
    merged: dict[str, Value] = {
        key: value
        for key, value in base.items()
        if str(key).lower() not in overridden
    }
    merged.update(override)
    return merged


def has_key(mapping: Mapping[str, object], name: str) -> bool:
    """Return True if ``mapping`` holds ``name`` under any casing."""
    lower = name.lower()
    return any(str(key).lower() == lower for key in mapping)


def set_key(mapping: dict[str, Value], name: str, value: Value) -> None:
    """Set ``name`` in place, replacing any entry spelled differently."""
    lower = name.lower()
    for key in [key for key in mapping if str(key).lower() == lower]:
        del mapping[key]
    mapping[name] = value
