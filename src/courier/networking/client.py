"""Shared HTTP client state for the courier networking layer.

``HttpClient`` owns everything that outlives a single request: default
headers, proxy, the cookie jar, transient transport options and the cached
``requests.Session`` used as transport engine. Requests are composed with
``HttpClient.request`` and dispatched through ``HttpClient.dispatch``.
"""

from __future__ import annotations

import logging
import threading
from types import TracebackType
from typing import TYPE_CHECKING, Any, Mapping, Sequence

import requests
from requests.cookies import RequestsCookieJar

from .config import HttpClientConfig
from .cookies import FileCookieJar
from .handlers import HandlerStack, MockAdapter, build_handler_stack
from .merge import merge_options, set_key

if TYPE_CHECKING:
    from .request import CompiledRequest, RequestBuilder

logger = logging.getLogger(__name__)

HANDLER_OPTION = "handler"

CookieKey = tuple[str, str, str]


class HttpClient:
    """Long-lived client shared by many RequestBuilder instances.

    Transient state (the default-headers flag, options added with
    ``add_transport_option`` and temporary cookies) applies to the next
    dispatch only and is reset afterwards, whether the dispatch succeeded or
    not. Choices made on a RequestBuilder travel inside its compiled request
    and never touch this state. All access to shared state goes through
    ``lock``.
    """

    def __init__(self, config: HttpClientConfig | None = None) -> None:
        """Create a new HttpClient.

        Args:
            config: Baseline transport settings; defaults to HttpClientConfig().
        """
        self._config = config or HttpClientConfig()
        self._default_headers: dict[str, str] = dict(
            self._config.default_headers
        )
        self._use_default_headers = False
        self._proxy: str | None = self._config.proxy
        self._cookie_jar: RequestsCookieJar | None = None
        if self._config.cookie_file:
            self._cookie_jar = FileCookieJar(self._config.cookie_file)
        self._temp_cookies: list[CookieKey] = []
        self._options: dict[str, Any] = {}
        self._mock: MockAdapter | None = None
        self._session: requests.Session | None = None
        self._stack: HandlerStack | None = None
        self._engine_fingerprint: int | None = None
        self.lock = threading.RLock()

    @property
    def config(self) -> HttpClientConfig:
        return self._config

    def request(self, url: str) -> RequestBuilder:
        """Start composing a request to ``url``."""
        from .request import RequestBuilder

        return RequestBuilder(self, url)

    def set_proxy(self, proxy: str | None) -> HttpClient:
        """Set the proxy as ``host:port`` (or a full URL), None to disable."""
        with self.lock:
            self._proxy = proxy
        return self

    def set_default_headers(self, headers: Mapping[str, str]) -> HttpClient:
        """Set headers applied to requests that opt in via use_default_headers."""
        with self.lock:
            self._default_headers = dict(headers)
        return self

    def use_default_headers(self, value: bool = True) -> HttpClient:
        with self.lock:
            self._use_default_headers = value
        return self

    @property
    def uses_default_headers(self) -> bool:
        return self._use_default_headers

    def set_cookie_file(self, filename: str | None) -> HttpClient:
        """Swap the cookie jar for a file-backed one, or a fresh in-memory jar."""
        with self.lock:
            if filename is not None:
                self._cookie_jar = FileCookieJar(filename)
            else:
                self._cookie_jar = RequestsCookieJar()
            self._temp_cookies = []
        return self

    def get_cookies(self) -> RequestsCookieJar:
        with self.lock:
            if self._cookie_jar is None:
                self._cookie_jar = RequestsCookieJar()
            return self._cookie_jar

    def add_cookie(
        self,
        name: str,
        value: str | None,
        domain: str | None = None,
        *,
        temporary: bool = True,
    ) -> HttpClient:
        """Write a cookie into the live jar.

        Temporary cookies are removed again after the next dispatch.
        """
        with self.lock:
            cookie = self.get_cookies().set(name, value, domain=domain or "")
            if temporary and cookie is not None:
                self._temp_cookies.append((cookie.domain, cookie.path, cookie.name))
        return self

    def add_transport_option(self, key: str, value: Any) -> HttpClient:
        """Add a transport option for the next dispatch.

        Entries under ``handler`` accumulate in order; any other key
        overwrites the previous value.
        """
        with self.lock:
            if key == HANDLER_OPTION:
                self._options.setdefault(HANDLER_OPTION, []).append(value)
            else:
                set_key(self._options, key, value)
        return self

    def mock_response(
        self,
        body: str | bytes,
        code: int = 200,
        headers: Mapping[str, str] | None = None,
    ) -> HttpClient:
        """Answer every dispatch with a canned response until changed."""
        with self.lock:
            self._mock = MockAdapter(body, code, headers)
        return self

    def clear_mock(self) -> HttpClient:
        with self.lock:
            self._mock = None
        return self

    def get_merged_transport_options(
        self,
        use_default_headers: bool = False,
        handlers: Sequence[Any] = (),
    ) -> dict[str, Any]:
        """Return the option bag for the next dispatch.

        Baseline settings are overlaid with transient options, default
        headers (when enabled here or on the client) and the proxy. The
        ``handler`` entry is the handler stack built from the client's
        transient handlers followed by ``handlers``.
        """
        with self.lock:
            options = self._config.transport_options()
            transient = {
                key: value
                for key, value in self._options.items()
                if key != HANDLER_OPTION
            }
            options = merge_options(options, transient)
            if self._use_default_headers or use_default_headers:
                options["headers"] = merge_options(
                    options.get("headers") or {}, self._default_headers
                )
            if self._proxy is not None:
                proxy = self._proxy
                if "://" not in proxy:
                    proxy = f"http://{proxy}"
                options["proxies"] = {"http": proxy, "https": proxy}
            self.engine(handlers)
            options[HANDLER_OPTION] = self._stack
            return options

    def engine(self, handlers: Sequence[Any] = ()) -> requests.Session:
        """Return the transport engine, rebuilding it if its handlers changed."""
        with self.lock:
            entries = [*self._options.get(HANDLER_OPTION, []), *handlers]
            fingerprint = self._compute_fingerprint(entries)
            if (
                self._session is not None
                and self._engine_fingerprint == fingerprint
            ):
                return self._session
            logger.debug(
                "Building transport engine (middleware=%d, mocked=%s)",
                len(entries),
                self._mock is not None,
            )
            return self._mount(build_handler_stack(entries, self._mock), fingerprint)

    def dispatch(self, compiled: CompiledRequest) -> requests.Response:
        """Send a compiled request and reset transient state afterwards.

        The request goes through the handler stack it was compiled with, so
        re-sending a compiled request runs the same middleware again.
        """
        with self.lock:
            try:
                session = self._engine_for(compiled.options.get(HANDLER_OPTION))
                if compiled.use_cookie:
                    jar = self.get_cookies()
                else:
                    jar = RequestsCookieJar()
                for name, value, domain in compiled.cookies:
                    cookie = jar.set(name, value, domain=domain or "")
                    if jar is self._cookie_jar and cookie is not None:
                        self._temp_cookies.append(
                            (cookie.domain, cookie.path, cookie.name)
                        )
                session.cookies = jar
                session.max_redirects = compiled.options["max_redirects"]
                prepared = session.prepare_request(compiled.to_request())
                response = session.send(prepared, **compiled.send_kwargs())
                logger.debug(
                    "%s %s -> %s",
                    compiled.method,
                    compiled.url,
                    response.status_code,
                )
                return response
            except requests.exceptions.RequestException as exc:
                logger.warning(
                    "%s %s failed: %s", compiled.method, compiled.url, exc
                )
                raise
            finally:
                self.reset_transient_state()

    def reset_transient_state(self) -> None:
        """Return transient state to its baseline."""
        with self.lock:
            self._remove_temp_cookies()
            self._use_default_headers = False
            self._options = {}
            if isinstance(self._cookie_jar, FileCookieJar):
                self._cookie_jar.save()
            logger.debug("Reset transient client state")

    def close(self) -> None:
        with self.lock:
            if self._session is not None:
                self._session.close()
                self._session = None
                self._stack = None
                self._engine_fingerprint = None

    def __enter__(self) -> HttpClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def _engine_for(self, stack: HandlerStack | None) -> requests.Session:
        if stack is None:
            return self.engine()
        if self._session is not None and self._stack is stack:
            return self._session
        # Stack built for an earlier engine; its fingerprint is unknown.
        return self._mount(stack, None)

    def _mount(
        self, stack: HandlerStack, fingerprint: int | None
    ) -> requests.Session:
        if self._session is not None:
            self._session.close()
        session = requests.Session()
        session.mount("http://", stack)
        session.mount("https://", stack)
        self._session = session
        self._stack = stack
        self._engine_fingerprint = fingerprint
        return session

    def _remove_temp_cookies(self) -> None:
        if not self._temp_cookies:
            return
        jar = self.get_cookies()
        stored = {(cookie.domain, cookie.path, cookie.name) for cookie in jar}
        for domain, path, name in self._temp_cookies:
            if (domain, path, name) in stored:
                jar.clear(domain, path, name)
                stored.discard((domain, path, name))
        self._temp_cookies = []

    def _compute_fingerprint(self, entries: Sequence[Any]) -> int:
        handlers = tuple(id(entry) for entry in entries)
        mock = (id(self._mock), self._mock.state) if self._mock else None
        return hash((handlers, mock))
