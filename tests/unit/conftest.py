"""Unit test fixtures (fakes and stubs).

Provides a scripted transport for testing the retry executor without a
network.
"""

import asyncio
from typing import Union

import httpx
import pytest

from retryable_http.request import RetryableRequest
from retryable_http.transport.base_transport import BaseTransport

ScriptItem = Union[httpx.Response, BaseException, tuple[float, Union[httpx.Response, BaseException]]]


class ScriptedTransport(BaseTransport):
    """
    Transport replaying a fixed script of results.

    Each item is a response to return, an exception to raise, or a
    ``(delay_seconds, item)`` tuple that sleeps first. The last item repeats
    once the script runs out.
    """

    def __init__(self, script: list[ScriptItem]):
        self.script = list(script)
        self.calls = 0
        self.bodies: list[bytes] = []
        self.closed = False

    async def send(self, request: RetryableRequest) -> httpx.Response:
        self.calls += 1

        body = request.open_body()
        if body is not None:
            with body:
                self.bodies.append(body.read())

        item = self.script[min(self.calls, len(self.script)) - 1]
        if isinstance(item, tuple):
            delay, item = item
            await asyncio.sleep(delay)
        if isinstance(item, BaseException):
            raise item
        return item

    async def close(self):
        self.closed = True


@pytest.fixture
def scripted_transport():
    """Factory fixture building a ScriptedTransport.

    Usage:
        def test_something(scripted_transport):
            transport = scripted_transport(httpx.Response(500), httpx.Response(200))
    """
    def _create(*script: ScriptItem) -> ScriptedTransport:
        return ScriptedTransport(list(script))

    return _create


@pytest.fixture
def get_request() -> RetryableRequest:
    """Bodiless GET request."""
    return RetryableRequest(method="GET", url="http://testserver/resource")
