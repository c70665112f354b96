# pyright: reportUnknownMemberType=false
import pytest

from courier.networking.config import (
    DEFAULT_USER_AGENT,
    HttpClientConfig,
    load_client_config,
)


def test_config_defaults_are_stable():
    config = HttpClientConfig()

    assert config.user_agent == DEFAULT_USER_AGENT
    assert dict(config.default_headers) == {}
    assert config.allow_redirects is True
    assert config.max_redirects == 8
    assert config.verify_tls is True
    assert config.connect_timeout_seconds == 30.0
    assert config.read_timeout_seconds == 240.0
    assert config.proxy is None
    assert config.cookie_file is None


def test_config_default_headers_are_independent():
    first = HttpClientConfig()
    second = HttpClientConfig()

    assert first.default_headers is not second.default_headers


def test_config_default_headers_are_immutable():
    config = HttpClientConfig(default_headers={"X-Test": "1"})

    with pytest.raises(TypeError):
        config.default_headers["X-Test"] = "2"  # type: ignore[index]


def test_config_copies_external_headers_input():
    headers = {"X-Test": "1"}
    config = HttpClientConfig(default_headers=headers)
    headers["X-Test"] = "2"

    assert config.default_headers["X-Test"] == "1"


def test_config_rejects_negative_max_redirects():
    with pytest.raises(ValueError):
        HttpClientConfig(max_redirects=-1)


def test_config_rejects_non_positive_timeouts():
    with pytest.raises(ValueError):
        HttpClientConfig(connect_timeout_seconds=0)
    with pytest.raises(ValueError):
        HttpClientConfig(read_timeout_seconds=-1)


def test_config_rejects_empty_user_agent():
    with pytest.raises(ValueError):
        HttpClientConfig(user_agent="")


def test_transport_options_reflect_config():
    config = HttpClientConfig(
        user_agent="TestAgent/1.0",
        max_redirects=3,
        verify_tls=False,
        connect_timeout_seconds=1.0,
        read_timeout_seconds=2.0,
    )

    assert config.transport_options() == {
        "allow_redirects": True,
        "max_redirects": 3,
        "connect_timeout": 1.0,
        "timeout": 2.0,
        "verify": False,
        "headers": {"User-Agent": "TestAgent/1.0"},
    }


def test_from_env_reads_overrides(monkeypatch):
    monkeypatch.setenv("COURIER_USER_AGENT", "EnvAgent/2.0")
    monkeypatch.setenv("COURIER_HTTP_REDIRECTS", "no")
    monkeypatch.setenv("COURIER_HTTP_MAX_REDIRECTS", "2")
    monkeypatch.setenv("COURIER_HTTP_TIMEOUT", "5")
    monkeypatch.setenv("COURIER_HTTP_VERIFY_TLS", "0")
    monkeypatch.setenv("COURIER_HTTP_PROXY", "127.0.0.1:8080")

    config = load_client_config()

    assert config.user_agent == "EnvAgent/2.0"
    assert config.allow_redirects is False
    assert config.max_redirects == 2
    assert config.read_timeout_seconds == 5.0
    assert config.verify_tls is False
    assert config.proxy == "127.0.0.1:8080"


def test_from_env_ignores_malformed_numbers(monkeypatch):
    monkeypatch.setenv("COURIER_HTTP_MAX_REDIRECTS", "many")
    monkeypatch.setenv("COURIER_HTTP_CONNECT_TIMEOUT", "-3")

    config = HttpClientConfig.from_env()

    assert config.max_redirects == 8
    assert config.connect_timeout_seconds == 30.0
