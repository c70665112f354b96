import json

import pytest

from courier.networking.client import HttpClient
from courier.networking.config import HttpClientConfig
from courier.networking.cookies import FileCookieJar, get_cookie_by_name


def test_file_jar_round_trips_through_disk(tmp_path):
    path = tmp_path / "cookies.json"
    jar = FileCookieJar(path)
    jar.set("sid", "abc", domain="example.com")

    jar.save()

    assert json.loads(path.read_text())[0]["name"] == "sid"
    reloaded = FileCookieJar(path)
    assert get_cookie_by_name(reloaded, "sid").value == "abc"


def test_file_jar_skips_session_cookies_when_asked(tmp_path):
    path = tmp_path / "cookies.json"
    jar = FileCookieJar(path, store_session_cookies=False)
    jar.set("sid", "abc", domain="example.com", discard=True)

    jar.save()

    assert json.loads(path.read_text()) == []


def test_file_jar_rejects_corrupt_file(tmp_path):
    path = tmp_path / "cookies.json"
    path.write_text("{broken")

    with pytest.raises(ValueError):
        FileCookieJar(path)


def test_empty_file_loads_nothing(tmp_path):
    path = tmp_path / "cookies.json"
    path.write_text("")

    assert len(FileCookieJar(path)) == 0


def test_client_saves_cookie_file_after_dispatch(tmp_path):
    path = tmp_path / "jar.json"
    client = HttpClient().set_cookie_file(str(path)).mock_response("ok")
    client.add_cookie("keep", "1", "example.com", temporary=False)

    client.request("http://example.com/").add_cookie("tmp", "2", "example.com").get_http_response()

    names = [record["name"] for record in json.loads(path.read_text())]
    assert names == ["keep"]


def test_client_loads_cookie_file_from_config(tmp_path):
    path = tmp_path / "jar.json"
    jar = FileCookieJar(path)
    jar.set("sid", "abc", domain="example.com")
    jar.save()

    client = HttpClient(HttpClientConfig(cookie_file=str(path)))

    assert isinstance(client.get_cookies(), FileCookieJar)
    assert get_cookie_by_name(client.get_cookies(), "sid").value == "abc"


def test_set_cookie_file_none_swaps_to_memory_jar(tmp_path):
    client = HttpClient().set_cookie_file(str(tmp_path / "jar.json"))

    client.set_cookie_file(None)

    assert not isinstance(client.get_cookies(), FileCookieJar)
    assert len(client.get_cookies()) == 0
