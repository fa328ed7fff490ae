"""
httpx transport implementation.

Sends requests with an httpx AsyncClient. Supports:
- Connection pooling via a persistent client
- Redirect following with a bounded redirect count
- Typed error categories for redirect loops and untrusted certificates
"""

import ssl
import time
from typing import Optional

import httpx
import structlog

from retryable_http.config import Settings, settings as default_settings
from retryable_http.request import RetryableRequest
from retryable_http.transport.base_transport import BaseTransport
from retryable_http.transport.exceptions import (
    TooManyRedirectsError,
    TransportError,
    TransportTimeoutError,
    UntrustedCertificateError,
)


logger = structlog.get_logger(__name__)


class HttpxTransport(BaseTransport):
    """
    Transport over ``httpx.AsyncClient``.

    Each ``send`` is exactly one attempt: httpx's own connection retries
    are left at zero so that the retry executor sees every failure.

    Features:
    - Connection pooling via persistent AsyncClient
    - Redirects followed up to MAX_REDIRECTS, then TooManyRedirectsError
    - Certificate verification failures raised as UntrustedCertificateError
    - Pluggable ``httpx.AsyncBaseTransport`` (e.g., MockTransport in tests)
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        connection_limits: Optional[httpx.Limits] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize httpx transport.

        Args:
            settings: Transport settings (timeout, redirects, TLS, proxies)
            connection_limits: httpx connection pool limits (default: 100 max connections)
            transport: Optional low-level httpx transport to mount
        """
        settings = settings if settings is not None else default_settings

        self.timeout = settings.REQUEST_TIMEOUT
        self.max_redirects = settings.MAX_REDIRECTS
        self.verify = settings.VERIFY_TLS
        self.trust_env = settings.TRUST_ENV

        if connection_limits is None:
            connection_limits = httpx.Limits(
                max_keepalive_connections=20,
                max_connections=100,
                keepalive_expiry=30.0
            )

        self._client: Optional[httpx.AsyncClient] = None
        self._connection_limits = connection_limits
        self._transport = transport

        logger.info(
            "httpx transport initialized",
            timeout=self.timeout,
            max_redirects=self.max_redirects,
            verify=self.verify,
            custom_transport=transport is not None,
        )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                limits=self._connection_limits,
                follow_redirects=True,
                max_redirects=self.max_redirects,
                verify=self.verify,
                trust_env=self.trust_env,
                transport=self._transport,
            )
            logger.debug("Created new httpx AsyncClient")
        return self._client

    async def send(self, request: RetryableRequest) -> httpx.Response:
        """
        Send one attempt of ``request``.

        The body stream is opened fresh, read fully and closed before the
        request goes out, so every attempt carries the complete payload.
        """
        start_time = time.monotonic()
        client = await self._get_client()

        content = None
        body = request.open_body()
        if body is not None:
            with body:
                content = body.read()

        http_request = client.build_request(
            request.method,
            request.url,
            headers=request.headers,
            content=content,
        )

        try:
            response = await client.send(http_request)

        except httpx.TooManyRedirects as e:
            raise TooManyRedirectsError(
                f"Stopped after {self.max_redirects} redirects",
                details={"url": str(http_request.url), "error": str(e)}
            ) from e

        except httpx.TimeoutException as e:
            raise TransportTimeoutError(
                f"Request timeout after {self.timeout}s",
                details={"url": str(http_request.url), "error_type": type(e).__name__}
            ) from e

        except httpx.RequestError as e:
            if _is_certificate_error(e):
                raise UntrustedCertificateError(
                    f"Server certificate is not trusted: {e}",
                    details={"url": str(http_request.url)}
                ) from e
            raise TransportError(
                f"Network error: {e}",
                details={"url": str(http_request.url), "error_type": type(e).__name__}
            ) from e

        logger.debug(
            "Attempt completed",
            method=request.method,
            url=str(http_request.url),
            status_code=response.status_code,
            latency_ms=int((time.monotonic() - start_time) * 1000),
        )
        return response

    async def close(self):
        """Close the HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            logger.info("httpx transport closed")

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"timeout={self.timeout}s, "
            f"max_redirects={self.max_redirects})"
        )


def _is_certificate_error(error: BaseException) -> bool:
    """Walk the exception chain looking for a TLS verification failure."""
    seen: set[int] = set()
    current: Optional[BaseException] = error
    while current is not None and id(current) not in seen:
        if isinstance(current, ssl.SSLCertVerificationError):
            return True
        seen.add(id(current))
        current = current.__cause__ or current.__context__
    return False
