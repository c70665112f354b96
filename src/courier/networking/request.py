"""Per-call request composition.

A ``RequestBuilder`` accumulates query parameters, one body encoding,
headers, cookies and transport options through chainable calls, compiles them
together with the owning ``HttpClient``'s current state into a
``CompiledRequest`` and dispatches it once. Builders are not safe for
concurrent mutation; callers own that.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Mapping, TypeVar

import requests

from .body import (
    Body,
    FormBody,
    JsonBody,
    MultipartBody,
    MultipartPart,
    PartContents,
    encode_body,
    encode_json_value,
    select_body,
)
from .client import HANDLER_OPTION, HttpClient
from .errors import InputValidationError
from .mapping import ResponseModel, map_response, resolve_destination
from .merge import merge_options, set_key
from .params import header_value, normalize_params, normalize_value
from .response import decode_response

logger = logging.getLogger(__name__)

Result = TypeVar("Result")

TRANSPORT_OPTION_KEYS = frozenset(
    {
        "allow_redirects",
        "max_redirects",
        "connect_timeout",
        "timeout",
        "verify",
        "cert",
        "stream",
        "proxies",
        "headers",
        "query",
        HANDLER_OPTION,
    }
)


@dataclass(frozen=True)
class CompiledRequest:
    """Fully merged request ready for dispatch."""

    method: str
    url: str
    headers: Mapping[str, Any] = field(default_factory=dict)
    params: Mapping[str, Any] = field(default_factory=dict)
    body: bytes | None = None
    options: Mapping[str, Any] = field(default_factory=dict)
    use_cookie: bool = True
    cookies: tuple[tuple[str, str | None, str | None], ...] = ()

    def __post_init__(self) -> None:
        for name in ("headers", "params", "options"):
            object.__setattr__(
                self, name, MappingProxyType(dict(getattr(self, name)))
            )

    def to_request(self) -> requests.Request:
        return requests.Request(
            method=self.method,
            url=self.url,
            headers=dict(self.headers),
            params=dict(self.params),
            data=self.body,
        )

    def send_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for ``requests.Session.send``."""
        options = self.options
        return {
            "timeout": (options.get("connect_timeout"), options.get("timeout")),
            "verify": options.get("verify", True),
            "allow_redirects": options.get("allow_redirects", True),
            "proxies": dict(options.get("proxies") or {}),
            "cert": options.get("cert"),
            "stream": bool(options.get("stream", False)),
        }


class RequestBuilder:
    """One-shot builder for a single HTTP call."""

    def __init__(self, client: HttpClient, url: str) -> None:
        if not url:
            raise InputValidationError("url must not be empty")
        self._client = client
        self._url = url
        self._query: dict[str, Any] = {}
        self._form: FormBody | None = None
        self._json: JsonBody | None = None
        self._multipart: MultipartBody | None = None
        self._headers: dict[str, Any] = {}
        self._method: str | None = None
        self._use_cookie = True
        self._use_default_headers = False
        self._cookies: list[tuple[str, str | None, str | None]] = []
        self._middleware: list[Any] = []
        self._options: dict[str, Any] = {}
        self._compiled: CompiledRequest | None = None
        self._response: requests.Response | None = None

    @property
    def url(self) -> str:
        return self._url

    def add_param(self, key: str, value: Any) -> RequestBuilder:
        """Add a query param, overwriting any previous value for ``key``."""
        self._query[key] = normalize_value(value)
        return self

    def add_params(self, params: Mapping[str, Any]) -> RequestBuilder:
        """Add query params; values set with add_param win on conflicts."""
        self._query = {**normalize_params(params), **self._query}
        return self

    def add_post(self, key: str, value: Any) -> RequestBuilder:
        """Add a form field, overwriting any previous value for ``key``."""
        if self._form is None:
            self._form = FormBody()
        self._form.fields[key] = normalize_value(value)
        return self

    def add_posts(self, params: Mapping[str, Any]) -> RequestBuilder:
        """Add form fields; values set with add_post win on conflicts."""
        if self._form is None:
            self._form = FormBody()
        self._form.fields = {**normalize_params(params), **self._form.fields}
        return self

    def add_post_json(self, value: Any) -> RequestBuilder:
        """Set the JSON body from a mapping, sequence, dataclass or JSON text.

        Raises:
            InputValidationError: ``value`` cannot be used as a JSON body.
        """
        self._json = JsonBody(encode_json_value(value))
        return self

    def add_multipart(
        self,
        name: str,
        contents: PartContents,
        headers: Mapping[str, str] | None = None,
        filename: str | None = None,
    ) -> RequestBuilder:
        if self._multipart is None:
            self._multipart = MultipartBody()
        self._multipart.parts.append(
            MultipartPart(name, contents, dict(headers or {}), filename)
        )
        return self

    def set_method(self, value: str) -> RequestBuilder:
        """Force the HTTP method (DELETE, PATCH, ...)."""
        self._method = value
        return self

    def add_header(self, key: str, value: Any) -> RequestBuilder:
        """Add a header, overwriting previous and default values for ``key``."""
        set_key(self._headers, key, header_value(value))
        return self

    def add_headers(self, headers: Mapping[str, Any]) -> RequestBuilder:
        """Add headers; values set with add_header win on conflicts."""
        normalized = {key: header_value(value) for key, value in headers.items()}
        self._headers = merge_options(normalized, self._headers)
        return self

    def use_default_headers(self) -> RequestBuilder:
        """Merge the client's default headers into this request only."""
        self._use_default_headers = True
        return self

    def add_cookie(
        self, name: str, value: str | None, domain: str | None = None
    ) -> RequestBuilder:
        """Send a cookie with this request; it is dropped from the jar afterwards."""
        self._cookies.append((name, value, domain))
        return self

    def disable_cookies(self) -> RequestBuilder:
        """Send this request without any cookie from the shared jar."""
        self._use_cookie = False
        return self

    without_cookie = disable_cookies

    def add_client_option(self, key: str, value: Any) -> RequestBuilder:
        """Set a transport option for this request only."""
        if key.lower() == HANDLER_OPTION:
            raise InputValidationError(
                "handlers are registered on the client; use middleware()"
            )
        set_key(self._options, key, value)
        return self

    def middleware(self, middleware: Callable[..., Any]) -> RequestBuilder:
        """Wrap the transport of this request with ``middleware``."""
        self._middleware.append(middleware)
        return self

    def resolve_method(self) -> str:
        if self._method is not None:
            return self._method.upper()
        if self._form is None and self._json is None and self._multipart is None:
            return "GET"
        return "POST"

    def compile(self) -> CompiledRequest:
        """Compile the request against the client's current state.

        The result is memoised; later calls return the same artifact.

        Raises:
            InputValidationError: conflicting body encodings or unknown
                transport options.
        """
        if self._compiled is not None:
            return self._compiled

        with self._client.lock:
            client_options = self._client.get_merged_transport_options(
                self._use_default_headers, self._middleware
            )
        request_options = {
            key: value
            for key, value in self._options.items()
            if key.lower() != "headers"
        }
        request_headers = next(
            (value for key, value in self._options.items() if key.lower() == "headers"),
            None,
        ) or {}
        options = {
            key.lower(): value
            for key, value in merge_options(client_options, request_options).items()
        }
        unknown = sorted(set(options) - TRANSPORT_OPTION_KEYS)
        if unknown:
            raise InputValidationError(
                f"Unknown transport options: {', '.join(unknown)}"
            )

        body: Body | None = select_body(self._form, self._json, self._multipart)
        method = self.resolve_method()

        headers = merge_options(
            merge_options(client_options.get("headers") or {}, request_headers),
            self._headers,
        )
        options.pop("headers", None)
        content = encode_body(body, headers)

        params = {**(options.pop("query", None) or {}), **self._query}

        self._compiled = CompiledRequest(
            method=method,
            url=self._url,
            headers=headers,
            params=params,
            body=content,
            options=options,
            use_cookie=self._use_cookie,
            cookies=tuple(self._cookies),
        )
        logger.debug("Compiled %s %s", method, self._url)
        return self._compiled

    def get_http_response(self, fresh: bool = False) -> requests.Response:
        """Dispatch the request once and return the transport response.

        Later calls reuse the cached response unless ``fresh`` is True, in
        which case the compiled request is sent again.
        """
        if self._response is not None and not fresh:
            return self._response
        with self._client.lock:
            try:
                compiled = self.compile()
            except Exception:
                self._client.reset_transient_state()
                raise
            self._response = self._client.dispatch(compiled)
        return self._response

    async def get_http_response_async(
        self, fresh: bool = False
    ) -> requests.Response:
        """Non-blocking variant of get_http_response."""
        return await asyncio.to_thread(self.get_http_response, fresh)

    def get_raw_response(self) -> str:
        """Return the response body as text."""
        return self.get_http_response().text

    def get_response(self, assoc: bool = False) -> Any:
        """Return the decoded JSON body, or the raw text for non-JSON responses."""
        return decode_response(self.get_http_response(), assoc)

    def map_response(
        self,
        callback: Callable[[Any], Result],
        factory: type[ResponseModel] | Callable[[], ResponseModel] | None = None,
    ) -> Result:
        """Wrap the response in a ResponseModel and hand it to ``callback``.

        The destination model is ``factory`` or, without one, the type the
        callback's parameter is annotated with. It is resolved before any
        network call.
        """
        destination = resolve_destination(callback, factory)
        return map_response(self.get_http_response(), callback, destination)
