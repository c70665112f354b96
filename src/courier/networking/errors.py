"""Error types raised by the courier networking layer."""

from __future__ import annotations

import traceback

import requests

# Transport failures are propagated as raised by requests, never wrapped.
TransportError = requests.exceptions.RequestException


class HttpClientError(Exception):
    """Base class for errors raised by courier itself."""


class InputValidationError(HttpClientError, ValueError):
    """Raised when a request cannot be built from the caller's input.

    Always raised before any network activity.
    """


class DecodeError(HttpClientError, ValueError):
    """Raised when a response declared as JSON cannot be decoded."""

    def __init__(self, message: str, raw: bytes = b"") -> None:
        super().__init__(message)
        self.raw = raw


class MappingError(HttpClientError):
    """Raised when a response model callback fails with a type mismatch."""

    def __init__(self, error: BaseException) -> None:
        self.function = _origin_function(error)
        super().__init__(f"Error from '{self.function}' with: {error}")


def _origin_function(error: BaseException) -> str:
    """Return the name of the function in which ``error`` was raised."""
    frames = traceback.extract_tb(error.__traceback__)
    if not frames:
        return "<unknown>"
    return frames[-1].name
