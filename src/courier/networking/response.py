"""Decoding of transport responses."""

from __future__ import annotations

import json
import re
from types import SimpleNamespace
from typing import Any

import requests

from .errors import DecodeError

JSON_PATTERN = re.compile(
    r"^(?:application|text)/(?:[a-z]+(?:[.-][0-9a-z]+)*[+.]|x-)?json(?:-[a-z]+)?",
    re.IGNORECASE,
)


def is_json_content_type(content_type: str | None) -> bool:
    """Return True if ``content_type`` names a JSON media type."""
    if not content_type:
        return False
    return JSON_PATTERN.match(content_type.strip()) is not None


def decode_json(text: str, assoc: bool = False) -> Any:
    """Decode ``text``; objects become dicts or SimpleNamespace per ``assoc``.

    Raises:
        ValueError: ``text`` is not valid JSON.
    """
    if assoc:
        return json.loads(text)
    return json.loads(text, object_hook=lambda data: SimpleNamespace(**data))


def decode_response(response: requests.Response, assoc: bool = False) -> Any:
    """Return the JSON-decoded body, or the raw text if the body is not JSON.

    Raises:
        DecodeError: the response declared a JSON content type but the body
            could not be decoded.
    """
    if not is_json_content_type(response.headers.get("content-type")):
        return response.text
    try:
        return decode_json(response.text, assoc)
    except ValueError as exc:
        raise DecodeError(f"json decode error: {exc}", raw=response.content) from exc
