"""Transport adapters used to assemble the requests engine.

A ``HandlerStack`` is the adapter mounted on the engine session. It wraps a
terminal adapter (normally ``HTTPAdapter``) with middleware callables of the
form ``middleware(next_send) -> send``, where ``send`` has the signature of
``BaseAdapter.send``.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any, Callable, Mapping

import requests
from requests.adapters import BaseAdapter, HTTPAdapter
from requests.structures import CaseInsensitiveDict
from requests.utils import get_encoding_from_headers

from .errors import InputValidationError

logger = logging.getLogger(__name__)

Send = Callable[..., requests.Response]
Middleware = Callable[[Send], Send]


class HandlerStack(BaseAdapter):
    """Adapter composing middleware around a terminal adapter."""

    def __init__(self, handler: BaseAdapter | None = None) -> None:
        super().__init__()
        self.handler = handler or HTTPAdapter()
        self._middleware: list[tuple[Middleware, str | None]] = []

    def push(self, middleware: Middleware, name: str | None = None) -> None:
        """Add middleware on top of the stack (outermost)."""
        self._middleware.append((middleware, name))

    def set_handler(self, handler: BaseAdapter) -> None:
        self.handler = handler

    @property
    def middleware(self) -> list[Middleware]:
        return [middleware for middleware, _ in self._middleware]

    def resolve(self) -> Send:
        """Return the composed send callable."""
        send: Send = self.handler.send
        for middleware, _ in self._middleware:
            send = middleware(send)
        return send

    def send(
        self, request: requests.PreparedRequest, **kwargs: Any
    ) -> requests.Response:
        return self.resolve()(request, **kwargs)

    def close(self) -> None:
        self.handler.close()


class MockAdapter(BaseAdapter):
    """Terminal adapter answering every request with a canned response."""

    def __init__(
        self,
        body: str | bytes = b"",
        status: int = 200,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__()
        self.body = body.encode("utf-8") if isinstance(body, str) else body
        self.status = status
        self.headers = dict(headers or {})
        self.calls: list[requests.PreparedRequest] = []

    @property
    def state(self) -> tuple[Any, ...]:
        """Hashable view of the canned response."""
        return (self.status, self.body, tuple(sorted(self.headers.items())))

    def send(
        self, request: requests.PreparedRequest, **kwargs: Any
    ) -> requests.Response:
        self.calls.append(request)
        logger.debug("Mocked %s %s -> %s", request.method, request.url, self.status)
        response = requests.Response()
        response.status_code = self.status
        response.headers = CaseInsensitiveDict(self.headers)
        response._content = self.body
        response._content_consumed = True
        response.url = request.url or ""
        response.request = request
        try:
            response.reason = HTTPStatus(self.status).phrase
        except ValueError:
            response.reason = ""
        response.encoding = (
            get_encoding_from_headers(response.headers) or "utf-8"
        )
        return response

    def close(self) -> None:
        return None


def build_handler_stack(
    handlers: list[Any], mock: MockAdapter | None = None
) -> HandlerStack:
    """Fold a list of handler entries onto a canonical stack.

    A ``HandlerStack`` entry replaces the stack built so far, a
    ``BaseAdapter`` entry replaces the terminal adapter and any other
    callable is pushed as middleware.
    """
    stack = HandlerStack(mock or HTTPAdapter())
    for entry in handlers:
        if isinstance(entry, HandlerStack):
            stack = entry
        elif isinstance(entry, BaseAdapter):
            stack.set_handler(entry)
        elif callable(entry):
            stack.push(entry, "request_handler")
        else:
            raise InputValidationError(
                "handler entries must be adapters or callables, "
                f"got {type(entry).__name__}"
            )
    return stack
