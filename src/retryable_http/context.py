"""
Call-scoped context carrying attempt metadata and cancellation.

A CallContext is passed alongside each retried call. It can hold opaque
values under keys, and it can be cancelled (explicitly or by a deadline) to
interrupt an in-flight attempt or a backoff wait.

Metadata is stored under a private key, so only this module can read or
write it. Contexts created with ``new_context()`` are preseeded with
metadata; a bare ``CallContext()`` is not, and the accessors below return
None for it.

Usage:
    >>> ctx = new_context()
    >>> response = await client.send(request, ctx)
    >>> number_of_attempts_from_context(ctx)
    1
"""

import asyncio
import time
from typing import Any, Hashable, Optional

from retryable_http.exceptions import CallCancelled, DeadlineExceeded
from retryable_http.metadata import AttemptMetadata

# Private key, identity compared
_METADATA_KEY = object()


class CallContext:
    """
    Opaque call scope with keyed values and cooperative cancellation.

    Args:
        timeout: Optional deadline in seconds from creation. Once it passes
            the context counts as cancelled with DeadlineExceeded.
    """

    def __init__(self, timeout: Optional[float] = None):
        self._values: dict[Hashable, Any] = {}
        self._done = asyncio.Event()
        self._error: Optional[CallCancelled] = None
        self._deadline = time.monotonic() + timeout if timeout is not None else None

    # === Values ===

    def set_value(self, key: Hashable, value: Any) -> None:
        self._values[key] = value

    def value(self, key: Hashable, default: Any = None) -> Any:
        return self._values.get(key, default)

    def has_value(self, key: Hashable) -> bool:
        return key in self._values

    @property
    def metadata(self) -> Optional[AttemptMetadata]:
        """Attempt metadata for this context, or None if never attached."""
        return self._values.get(_METADATA_KEY)

    def attach_metadata(self, metadata: Optional[AttemptMetadata] = None) -> AttemptMetadata:
        """Attach (or replace) the metadata record and return it."""
        metadata = metadata if metadata is not None else AttemptMetadata()
        self._values[_METADATA_KEY] = metadata
        return metadata

    # === Cancellation ===

    def cancel(self, reason: str = "context cancelled") -> None:
        """Cancel the context. Idempotent; the first reason wins."""
        if self._error is None:
            self._error = CallCancelled(reason)
        self._done.set()

    def remaining(self) -> Optional[float]:
        """Seconds until the deadline (never negative), or None without one."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    @property
    def cancelled(self) -> bool:
        if not self._done.is_set() and self.remaining() == 0.0:
            self._expire()
        return self._done.is_set()

    def err(self) -> Optional[CallCancelled]:
        """The cancellation error, or None while the context is live."""
        if not self.cancelled:
            return None
        return self._error

    async def wait(self) -> None:
        """Block until the context is cancelled or its deadline passes."""
        remaining = self.remaining()
        if remaining is None:
            await self._done.wait()
            return

        if remaining > 0:
            try:
                await asyncio.wait_for(self._done.wait(), timeout=remaining)
                return
            except asyncio.TimeoutError:
                pass
        self._expire()

    def _expire(self) -> None:
        if self._error is None:
            self._error = DeadlineExceeded("context deadline exceeded")
        self._done.set()

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"cancelled={self.cancelled}, "
            f"has_metadata={self.metadata is not None})"
        )


def new_context(timeout: Optional[float] = None) -> CallContext:
    """
    Return a CallContext preseeded with attempt metadata.

    Use one context per call: metadata is overwritten by each call that
    uses the context.
    """
    ctx = CallContext(timeout=timeout)
    ctx.attach_metadata()
    return ctx


def number_of_attempts_from_context(ctx: CallContext) -> Optional[int]:
    """Number of attempts the last call using ``ctx`` made, or None if untracked."""
    md = ctx.metadata
    if md is None:
        return None
    return md.attempts


def successful_request_duration_from_context(ctx: CallContext) -> Optional[float]:
    """
    Duration in seconds of the successful attempt, or None if untracked.

    Returns 0.0 for a tracked call that never succeeded.
    """
    md = ctx.metadata
    if md is None:
        return None
    return md.success_duration
