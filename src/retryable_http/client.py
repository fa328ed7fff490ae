"""
Retrying HTTP client.

RetryableClient bundles a RetryExecutor with its own HttpxTransport, so the
common case needs no wiring:

    >>> async with new_client() as client:
    ...     ctx = new_context()
    ...     response = await client.request("GET", "https://example.com", ctx=ctx)
    ...     number_of_attempts_from_context(ctx)
"""

from typing import Callable, Optional, Union

import httpx
import structlog

from retryable_http.config import Settings, settings as default_settings
from retryable_http.context import CallContext
from retryable_http.request import BodySource, RetryableRequest, new_request
from retryable_http.retry.backoff import BackOffPolicy
from retryable_http.retry.engine import RetryExecutor
from retryable_http.transport.base_transport import BaseTransport
from retryable_http.transport.httpx_transport import HttpxTransport

logger = structlog.get_logger(__name__)


class RetryableClient(RetryExecutor):
    """
    RetryExecutor that owns its transport.

    Tweak ``max_retries``, ``max_interval`` and ``max_elapsed_time`` on the
    instance (or via Settings) before issuing calls.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[BaseTransport] = None,
        backoff_factory: Optional[Callable[[], BackOffPolicy]] = None,
    ):
        settings = settings if settings is not None else default_settings
        if transport is None:
            transport = HttpxTransport(settings)
        super().__init__(transport, settings, backoff_factory)

    async def send(
        self,
        request: RetryableRequest,
        ctx: Optional[CallContext] = None,
    ) -> httpx.Response:
        """Send a prepared request with retries. See RetryExecutor.execute."""
        return await self.execute(request, ctx)

    async def request(
        self,
        method: str,
        url: Union[str, httpx.URL],
        *,
        body: Optional[BodySource] = None,
        headers: Optional[dict[str, str]] = None,
        ctx: Optional[CallContext] = None,
    ) -> httpx.Response:
        """Build a replayable request and send it with retries."""
        return await self.execute(new_request(method, url, body, headers), ctx)

    async def aclose(self) -> None:
        await self.transport.close()

    async def __aenter__(self) -> "RetryableClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


def new_client(settings: Optional[Settings] = None) -> RetryableClient:
    """
    Return a RetryableClient with the default policy.

    Defaults: 9 retries (10 attempts), 30s max backoff interval, no
    elapsed time limit.
    """
    return RetryableClient(settings)
