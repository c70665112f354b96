# pyright: reportUnknownParameterType=false, reportUnknownMemberType=false
from unittest.mock import patch

import requests
from requests.adapters import HTTPAdapter
from requests.structures import CaseInsensitiveDict

from courier.networking.client import HttpClient
from courier.networking.config import HttpClientConfig


def _response(
    *,
    content: bytes = b"",
    status: int = 200,
    reason: str = "OK",
    headers: dict[str, str] | None = None,
):
    response = requests.Response()
    response._content = content
    response._content_consumed = True
    response.status_code = status
    response.reason = reason
    response.headers = CaseInsensitiveDict(headers or {"Content-Type": "text/plain"})
    response.encoding = "utf-8"
    return response


def _answer(response):
    def send(request, **kwargs):
        response.request = request
        response.url = request.url
        return response

    return send


def test_404_is_returned_not_raised():
    client = HttpClient(HttpClientConfig(read_timeout_seconds=5.0))

    with patch.object(HTTPAdapter, "send") as mock_send:
        mock_send.return_value = _response(
            content=b"not found",
            status=404,
            reason="Not Found",
        )
        builder = client.request("http://example.com/missing")
        response = builder.get_http_response()

    assert response.status_code == 404
    assert response.reason == "Not Found"
    assert builder.get_raw_response() == "not found"


def test_500_is_returned_not_raised():
    client = HttpClient(HttpClientConfig(read_timeout_seconds=5.0))

    with patch.object(HTTPAdapter, "send") as mock_send:
        mock_send.return_value = _response(
            content=b"server error",
            status=500,
            reason="Internal Server Error",
        )
        builder = client.request("http://example.com/error")

        assert builder.get_response() == "server error"

    assert builder.get_http_response().status_code == 500


def test_302_without_redirects_is_returned():
    client = HttpClient(HttpClientConfig(read_timeout_seconds=5.0))

    with patch.object(HTTPAdapter, "send") as mock_send:
        mock_send.side_effect = _answer(
            _response(
                status=302,
                reason="Found",
                headers={"Location": "http://example.com/elsewhere"},
            )
        )
        response = (
            client.request("http://example.com/redirect")
            .add_client_option("allow_redirects", False)
            .get_http_response()
        )

    assert response.status_code == 302
    assert response.reason == "Found"
    assert mock_send.call_count == 1
