"""
Replayable request construction.

A request that may be sent several times needs a body that can be read from
the start on every attempt. A stream that was partially consumed by a failed
attempt would otherwise send only its tail on the retry.

``new_request`` buffers the body into memory once and gives the request a
body factory returning a fresh stream over those bytes on each call.
"""

import functools
import io
from dataclasses import dataclass, field
from typing import BinaryIO, Callable, Iterable, Optional, Union

import httpx
import structlog

from retryable_http.exceptions import RequestBodyError

logger = structlog.get_logger(__name__)

BodySource = Union[bytes, bytearray, memoryview, str, BinaryIO, Iterable[bytes]]


@dataclass(frozen=True)
class RetryableRequest:
    """
    Request descriptor sent once per attempt by a transport.

    The core never mutates a request. If ``body_factory`` is set, every call
    must return a new stream positioned at the start of the original bytes.
    The transport closes each stream once it has read it.

    Attributes:
        method: HTTP method (e.g., GET, POST)
        url: Target URL
        headers: Request headers
        body_factory: Optional callable returning a fresh readable body stream
    """

    method: str
    url: Union[str, httpx.URL]
    headers: dict[str, str] = field(default_factory=dict)
    body_factory: Optional[Callable[[], BinaryIO]] = None

    @property
    def has_body(self) -> bool:
        return self.body_factory is not None

    def open_body(self) -> Optional[BinaryIO]:
        """Return a new body stream, or None for a bodiless request."""
        if self.body_factory is None:
            return None
        return self.body_factory()


def new_request(
    method: str,
    url: Union[str, httpx.URL],
    body: Optional[BodySource] = None,
    headers: Optional[dict[str, str]] = None,
) -> RetryableRequest:
    """
    Build a request whose body can be replayed on every attempt.

    The whole body is read into memory here and one copy is kept for the
    lifetime of the request. For very large uploads, build a
    RetryableRequest with your own ``body_factory`` (e.g., one that reopens
    a file) instead.

    Args:
        method: HTTP method
        url: Target URL
        body: bytes, str (UTF-8 encoded), a readable file-like object, or an
            iterable of byte chunks
        headers: Optional request headers

    Returns:
        RetryableRequest with a replayable body factory

    Raises:
        httpx.InvalidURL: The URL cannot be parsed
        RequestBodyError: The body source could not be fully read (I/O
            failure, closed stream, or a chunk that is not bytes)
    """
    url = httpx.URL(url)
    data = _buffer_body(body)

    body_factory = None
    if data is not None:
        body_factory = functools.partial(io.BytesIO, data)

    logger.debug(
        "Built replayable request",
        method=method.upper(),
        url=str(url),
        body_bytes=len(data) if data is not None else 0,
    )

    return RetryableRequest(
        method=method.upper(),
        url=url,
        headers=dict(headers or {}),
        body_factory=body_factory,
    )


def _buffer_body(body: Optional[BodySource]) -> Optional[bytes]:
    if body is None:
        return None
    if isinstance(body, (bytes, bytearray, memoryview)):
        return bytes(body)
    if isinstance(body, str):
        return body.encode("utf-8")

    try:
        if hasattr(body, "read"):
            chunk = body.read()
            return chunk.encode("utf-8") if isinstance(chunk, str) else _chunk_bytes(chunk)
        return b"".join(_chunk_bytes(part) for part in body)
    except (OSError, ValueError, TypeError) as e:
        raise RequestBodyError(
            f"Unable to read request body: {e}",
            details={"error_type": type(e).__name__},
        ) from e


def _chunk_bytes(part) -> bytes:
    if not isinstance(part, (bytes, bytearray, memoryview)):
        raise TypeError(f"body chunks must be bytes, got {type(part).__name__}")
    return bytes(part)
