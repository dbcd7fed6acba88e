from __future__ import annotations

from datetime import datetime, timezone

import httpx

from tori_scrape.misc.http_client import HttpClient


def _client(handler) -> HttpClient:  # noqa: ANN001
    return HttpClient({"timeout_seconds": 5}, transport=httpx.MockTransport(handler))


def test_http_client_returns_raw_bytes_and_fetch_time() -> None:
    body = "<html>Myydään 120 €</html>".encode("iso8859-15")
    seen_headers: list[httpx.Headers] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen_headers.append(request.headers)
        return httpx.Response(200, content=body)

    before = datetime.now(timezone.utc)
    result = _client(handler).get("https://www.tori.fi/uusimaa?q=sohva")
    after = datetime.now(timezone.utc)

    assert result.ok is True
    assert result.status_code == 200
    assert result.content == body
    assert result.error is None
    assert before <= result.fetched_at <= after
    assert seen_headers[0]["accept-language"].startswith("fi")


def test_http_client_flags_error_status() -> None:
    result = _client(lambda request: httpx.Response(503)).get("https://www.tori.fi/")
    assert result.ok is False
    assert result.status_code == 503
    assert result.error == "status=503"


def test_http_client_transport_error_is_a_failed_result() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    result = _client(handler).get("https://www.tori.fi/")
    assert result.ok is False
    assert result.status_code is None
    assert result.content == b""
    assert "connection refused" in (result.error or "")
