"""Tests for the httpx-backed HttpClient."""

import logging
from unittest.mock import patch

import httpx
import pytest

from declient_sdk import (
    HttpClient,
    HttpClientConfig,
    ServiceClientError,
    ServiceConnectionError,
    ServiceContent,
    ServiceRequest,
    ServiceServerError,
    ServiceTimeoutError,
)


def request(**overrides) -> ServiceRequest:
    fields = dict(method="GET", service_name="users", path="/users/1")
    fields.update(overrides)
    return ServiceRequest(**fields)


class TestSend:
    def test_resolves_service_url(self, make_client):
        client, transport = make_client(lambda r: httpx.Response(200))
        client.send(request(params={"q": "x"}))
        assert str(transport.last.url) == "http://users.test/users/1?q=x"

    def test_unknown_service_uses_default_scheme(self, make_client):
        client, transport = make_client(lambda r: httpx.Response(200))
        client.send(request(service_name="billing"))
        assert transport.last.url.host == "billing"
        assert transport.last.url.scheme == "http"

    def test_content_headers_travel_with_body(self, make_client):
        client, transport = make_client(lambda r: httpx.Response(200))
        content = ServiceContent(body=b"{}", headers={"Content-Type": "application/json", "Content-Language": "de"})
        client.send(request(method="POST", headers={"X-Trace": "t"}, content=content))
        sent = transport.last
        assert sent.content == b"{}"
        assert sent.headers["Content-Language"] == "de"
        assert sent.headers["X-Trace"] == "t"
        assert sent.headers["X-Request-ID"]
        assert sent.headers["User-Agent"].startswith("declient-sdk-python")

    def test_request_id_is_kept(self, make_client):
        client, transport = make_client(lambda r: httpx.Response(200))
        client.send(request(headers={"X-Request-ID": "req-1"}))
        assert transport.last.headers["X-Request-ID"] == "req-1"

    @pytest.mark.parametrize(
        "status, error",
        [(400, ServiceClientError), (404, ServiceClientError), (500, ServiceServerError), (503, ServiceServerError)],
    )
    def test_status_mapping(self, make_client, status, error):
        client, _ = make_client(lambda r: httpx.Response(status, text="boom"))
        with pytest.raises(error) as exc_info:
            client.send(request())
        assert exc_info.value.status_code == status
        assert exc_info.value.request_id

    def test_timeout(self, make_client):
        def handler(r):
            raise httpx.ReadTimeout("slow", request=r)

        client, _ = make_client(handler)
        with pytest.raises(ServiceTimeoutError):
            client.send(request())

    def test_retries_connection_errors(self, make_client):
        attempts = []

        def handler(r):
            attempts.append(r)
            if len(attempts) < 3:
                raise httpx.ConnectError("refused", request=r)
            return httpx.Response(200)

        client, _ = make_client(handler, max_retries=2)
        with patch("declient_sdk.client.time.sleep") as sleep:
            assert client.send(request()).status_code == 200
        assert len(attempts) == 3
        assert sleep.call_count == 2

    def test_gives_up_after_retries(self, make_client):
        def handler(r):
            raise httpx.ConnectError("refused", request=r)

        client, _ = make_client(handler, max_retries=1)
        with patch("declient_sdk.client.time.sleep"):
            with pytest.raises(ServiceConnectionError, match="http://users.test/users/1"):
                client.send(request())

    def test_backoff_is_capped(self):
        client = HttpClient(HttpClientConfig(retry_backoff_factor=1.0, retry_backoff_max=3.0))
        assert [client._backoff_delay(n) for n in range(4)] == [1.0, 2.0, 3.0, 3.0]
        client.close()


class TestSendAsync:
    async def test_send_async(self, make_client):
        client, transport = make_client(lambda r: httpx.Response(200, json={"ok": True}))
        async with client:
            response = await client.send_async(request(method="DELETE"))
        assert response.json() == {"ok": True}
        assert transport.last.method == "DELETE"

    async def test_async_status_mapping(self, make_client):
        client, _ = make_client(lambda r: httpx.Response(502))
        with pytest.raises(ServiceServerError):
            await client.send_async(request())
        await client.aclose()

    async def test_separate_async_transport(self, services):
        seen = []

        def handler(r):
            seen.append(r)
            return httpx.Response(204)

        client = HttpClient(
            HttpClientConfig(services=services),
            transport=httpx.HTTPTransport(),
            async_transport=httpx.MockTransport(handler),
        )
        response = await client.send_async(request())
        assert response.status_code == 204
        assert seen[0].url.host == "users.test"
        await client.aclose()

    async def test_sync_only_transport_is_not_given_to_async_client(self, services):
        client = HttpClient(HttpClientConfig(services=services), transport=httpx.HTTPTransport())
        with patch.object(
            httpx.AsyncHTTPTransport, "handle_async_request", return_value=httpx.Response(204)
        ) as handle:
            response = await client.send_async(request())
        assert response.status_code == 204
        handle.assert_awaited_once()
        await client.aclose()

    async def test_close_warns_while_async_client_is_open(self, make_client, caplog):
        client, _ = make_client(lambda r: httpx.Response(204))
        await client.send_async(request())
        with caplog.at_level(logging.WARNING, logger="declient_sdk.client"):
            client.close()
        assert "use aclose()" in caplog.text
        await client.aclose()
        assert client._async_client.is_closed


class TestConfig:
    def test_resolve(self):
        config = HttpClientConfig(services={"users": "https://users.internal/"}, default_scheme="https")
        assert config.resolve("users") == "https://users.internal"
        assert config.resolve("orders") == "https://orders"

    def test_environment(self, monkeypatch):
        monkeypatch.setenv("DECLIENT_HTTP_SERVICES", '{"users": "http://localhost:9000"}')
        monkeypatch.setenv("DECLIENT_HTTP_MAX_RETRIES", "3")
        config = HttpClientConfig()
        assert config.services == {"users": "http://localhost:9000"}
        assert config.max_retries == 3

    def test_bounds(self):
        with pytest.raises(ValueError):
            HttpClientConfig(max_retries=11)
