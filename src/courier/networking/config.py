"""Configuration models for the HttpClient interface."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/98.0.4758.102 Safari/537.36"
)


def _default_headers() -> Mapping[str, str]:
    """Return immutable empty default headers mapping."""

    return MappingProxyType({})


def _float_env(name: str, default: float) -> float:
    try:
        value = os.getenv(name)
        return float(value) if value is not None else default
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    try:
        value = os.getenv(name)
        return int(value) if value is not None else default
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class HttpClientConfig:
    """Baseline transport settings for HttpClient.

    These values seed every merged option bag; any of them can be overridden
    for a single dispatch through ``HttpClient.add_transport_option`` or
    ``RequestBuilder.add_client_option``.
    """

    user_agent: str = DEFAULT_USER_AGENT
    default_headers: Mapping[str, str] = field(default_factory=_default_headers)
    allow_redirects: bool = True
    max_redirects: int = 8
    verify_tls: bool = True
    connect_timeout_seconds: float = 30.0
    read_timeout_seconds: float = 240.0
    proxy: str | None = None
    cookie_file: str | None = None

    def __post_init__(self) -> None:
        if self.max_redirects < 0:
            raise ValueError("max_redirects must be >= 0")
        if self.connect_timeout_seconds <= 0:
            raise ValueError("connect_timeout_seconds must be > 0")
        if self.read_timeout_seconds <= 0:
            raise ValueError("read_timeout_seconds must be > 0")
        if not self.user_agent:
            raise ValueError("user_agent must not be empty")

        # Freeze copied headers to avoid post-init mutation side effects.
        object.__setattr__(
            self,
            "default_headers",
            MappingProxyType(dict(self.default_headers)),
        )

    @classmethod
    def from_env(cls) -> HttpClientConfig:
        """Create a config from environment variables (evaluated at call time)."""
        defaults = cls()
        max_redirects = _int_env(
            "COURIER_HTTP_MAX_REDIRECTS", defaults.max_redirects
        )
        if max_redirects < 0:
            max_redirects = defaults.max_redirects
        connect_timeout = _float_env(
            "COURIER_HTTP_CONNECT_TIMEOUT", defaults.connect_timeout_seconds
        )
        if connect_timeout <= 0:
            connect_timeout = defaults.connect_timeout_seconds
        read_timeout = _float_env(
            "COURIER_HTTP_TIMEOUT", defaults.read_timeout_seconds
        )
        if read_timeout <= 0:
            read_timeout = defaults.read_timeout_seconds
        return cls(
            user_agent=os.getenv("COURIER_USER_AGENT") or defaults.user_agent,
            allow_redirects=_bool_env(
                "COURIER_HTTP_REDIRECTS", defaults.allow_redirects
            ),
            max_redirects=max_redirects,
            verify_tls=_bool_env("COURIER_HTTP_VERIFY_TLS", defaults.verify_tls),
            connect_timeout_seconds=connect_timeout,
            read_timeout_seconds=read_timeout,
            proxy=os.getenv("COURIER_HTTP_PROXY") or None,
            cookie_file=os.getenv("COURIER_COOKIE_FILE") or None,
        )

    def transport_options(self) -> dict[str, Any]:
        """Return the baseline option bag handed to the transport engine."""
        return {
            "allow_redirects": self.allow_redirects,
            "max_redirects": self.max_redirects,
            "connect_timeout": self.connect_timeout_seconds,
            "timeout": self.read_timeout_seconds,
            "verify": self.verify_tls,
            "headers": {"User-Agent": self.user_agent},
        }


def load_client_config() -> HttpClientConfig:
    """Load client settings from environment with sensible defaults."""
    return HttpClientConfig.from_env()
