"""
Unit tests for HttpxTransport.

Uses httpx.MockTransport so no sockets are opened.
"""

import ssl

import httpx
import pytest

from retryable_http.request import RetryableRequest, new_request
from retryable_http.transport.exceptions import (
    TooManyRedirectsError,
    TransportError,
    TransportTimeoutError,
    UntrustedCertificateError,
)
from retryable_http.transport.httpx_transport import HttpxTransport


def make_transport(test_settings, handler) -> HttpxTransport:
    return HttpxTransport(test_settings, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_send_returns_response(test_settings):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"path": request.url.path})

    transport = make_transport(test_settings, handler)

    response = await transport.send(RetryableRequest("GET", "http://testserver/items"))

    assert response.status_code == 200
    assert response.json() == {"path": "/items"}
    await transport.close()


@pytest.mark.asyncio
async def test_body_and_headers_sent_on_every_attempt(test_settings):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.method, request.headers.get("X-Trace"), request.content))
        return httpx.Response(500)

    transport = make_transport(test_settings, handler)
    request = new_request("POST", "http://testserver/upload", b"payload", {"X-Trace": "t-1"})

    for _ in range(3):
        await transport.send(request)

    assert seen == [("POST", "t-1", b"payload")] * 3
    await transport.close()


@pytest.mark.asyncio
async def test_redirects_followed(test_settings):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/old":
            return httpx.Response(301, headers={"Location": "/new"})
        return httpx.Response(200, text="moved here")

    transport = make_transport(test_settings, handler)

    response = await transport.send(RetryableRequest("GET", "http://testserver/old"))

    assert response.status_code == 200
    assert response.text == "moved here"
    await transport.close()


@pytest.mark.asyncio
async def test_redirect_loop_raises_typed_error(test_settings):
    test_settings.MAX_REDIRECTS = 3

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(307, headers={"Location": "/loop"})

    transport = make_transport(test_settings, handler)

    with pytest.raises(TooManyRedirectsError, match="Stopped after 3 redirects") as exc_info:
        await transport.send(RetryableRequest("GET", "http://testserver/loop"))

    assert isinstance(exc_info.value.__cause__, httpx.TooManyRedirects)
    await transport.close()


@pytest.mark.asyncio
async def test_connect_error_raises_transport_error(test_settings):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    transport = make_transport(test_settings, handler)

    with pytest.raises(TransportError) as exc_info:
        await transport.send(RetryableRequest("GET", "http://testserver/"))

    assert type(exc_info.value) is TransportError
    assert exc_info.value.details["error_type"] == "ConnectError"
    await transport.close()


@pytest.mark.asyncio
async def test_certificate_failure_raises_typed_error(test_settings):
    def handler(request: httpx.Request) -> httpx.Response:
        try:
            raise ssl.SSLCertVerificationError(1, "certificate verify failed: self signed")
        except ssl.SSLCertVerificationError as e:
            raise httpx.ConnectError(str(e), request=request) from e

    transport = make_transport(test_settings, handler)

    with pytest.raises(UntrustedCertificateError):
        await transport.send(RetryableRequest("GET", "https://testserver/"))
    await transport.close()


@pytest.mark.asyncio
async def test_timeout_raises_typed_error(test_settings):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    transport = make_transport(test_settings, handler)

    with pytest.raises(TransportTimeoutError, match="Request timeout"):
        await transport.send(RetryableRequest("GET", "http://testserver/"))
    await transport.close()


@pytest.mark.asyncio
async def test_close_reopens_client_on_next_send(test_settings):
    transport = make_transport(test_settings, lambda request: httpx.Response(204))

    await transport.send(RetryableRequest("GET", "http://testserver/"))
    await transport.close()
    response = await transport.send(RetryableRequest("GET", "http://testserver/"))

    assert response.status_code == 204
    await transport.close()


def test_repr(test_settings):
    assert repr(HttpxTransport(test_settings)) == "HttpxTransport(timeout=5.0s, max_redirects=10)"
