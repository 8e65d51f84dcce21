"""Tests for the single-request transport."""

from __future__ import annotations

import httpx
import pytest
import respx

from tests.conftest import API_BASE, TrackedStream
from wayback_resolver.core.exceptions import InvalidRequestError, TransportError
from wayback_resolver.wayback._transport import send


class TestSend:
    def test_returns_status_body_and_headers(
        self, wb_mock: respx.MockRouter, http_client: httpx.Client
    ) -> None:
        wb_mock.get("/wayback/available").mock(
            return_value=httpx.Response(200, content=b'{"ok": true}', headers={"X-Test": "1"})
        )

        raw = send(http_client, "GET", f"{API_BASE}/wayback/available", params={"url": "https://go.dev"})

        assert raw.status_code == 200
        assert raw.body == b'{"ok": true}'
        assert raw.headers["x-test"] == "1"

    def test_query_params_are_encoded(
        self, wb_mock: respx.MockRouter, http_client: httpx.Client
    ) -> None:
        route = wb_mock.get("/wayback/available").mock(return_value=httpx.Response(200))

        send(
            http_client,
            "GET",
            f"{API_BASE}/wayback/available",
            params={"url": "https://example.com/a?b=c&d=e"},
        )

        assert route.calls.last.request.url.params["url"] == "https://example.com/a?b=c&d=e"

    def test_rate_limit_is_not_special(
        self, wb_mock: respx.MockRouter, http_client: httpx.Client
    ) -> None:
        wb_mock.get("/wayback/available").mock(return_value=httpx.Response(429, text="slow down"))

        raw = send(http_client, "GET", f"{API_BASE}/wayback/available")

        assert raw.status_code == 429
        assert raw.body == b"slow down"

    def test_redirect_not_followed_by_default(
        self, wb_mock: respx.MockRouter, http_client: httpx.Client
    ) -> None:
        wb_mock.post("/save/").mock(
            return_value=httpx.Response(302, headers={"Location": "https://web.archive.org/web/1/x"})
        )

        raw = send(http_client, "POST", f"{API_BASE}/save/")

        assert raw.status_code == 302
        assert raw.headers["location"] == "https://web.archive.org/web/1/x"

    @pytest.mark.parametrize(
        "error",
        [
            httpx.ConnectError("connection refused"),
            httpx.ReadTimeout("timed out"),
            httpx.RemoteProtocolError("peer closed connection"),
        ],
    )
    def test_network_errors_raise_transport_error(
        self,
        wb_mock: respx.MockRouter,
        http_client: httpx.Client,
        error: httpx.RequestError,
    ) -> None:
        wb_mock.get("/save/status/job-1").mock(side_effect=error)

        with pytest.raises(TransportError) as exc_info:
            send(http_client, "GET", f"{API_BASE}/save/status/job-1")

        assert exc_info.value.url == f"{API_BASE}/save/status/job-1"
        assert isinstance(exc_info.value.__cause__, type(error))

    def test_invalid_url_raises_invalid_request(self, wb_mock: respx.MockRouter, http_client: httpx.Client) -> None:
        route = wb_mock.get(path__startswith="/save/status/").mock(return_value=httpx.Response(200))

        with pytest.raises(InvalidRequestError) as exc_info:
            send(http_client, "GET", f"{API_BASE}/save/status/spn2-\x01bad")

        assert isinstance(exc_info.value.__cause__, httpx.InvalidURL)
        assert route.call_count == 0

    def test_unencodable_header_raises_invalid_request(
        self, wb_mock: respx.MockRouter, http_client: httpx.Client
    ) -> None:
        route = wb_mock.post("/save/").mock(return_value=httpx.Response(200))

        with pytest.raises(InvalidRequestError) as exc_info:
            send(http_client, "POST", f"{API_BASE}/save/", headers={"Cookie": "sess=café"})

        assert isinstance(exc_info.value.__cause__, UnicodeEncodeError)
        assert route.call_count == 0


class TestBodyRelease:
    def test_body_closed_after_full_read(self, wb_mock: respx.MockRouter, http_client: httpx.Client) -> None:
        stream = TrackedStream([b'{"archived_', b'snapshots": {}}'])
        wb_mock.get("/wayback/available").mock(return_value=httpx.Response(200, stream=stream))

        raw = send(http_client, "GET", f"{API_BASE}/wayback/available")

        assert raw.body == b'{"archived_snapshots": {}}'
        assert stream.closed

    def test_body_closed_when_read_fails_part_way(
        self, wb_mock: respx.MockRouter, http_client: httpx.Client
    ) -> None:
        stream = TrackedStream([b'{"archived_'], error=httpx.ReadError("connection reset"))
        wb_mock.get("/wayback/available").mock(return_value=httpx.Response(200, stream=stream))

        with pytest.raises(TransportError):
            send(http_client, "GET", f"{API_BASE}/wayback/available")

        assert stream.closed
