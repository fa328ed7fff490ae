"""
Custom exceptions for retryable HTTP calls.

These exceptions are the terminal outcomes of a retried call. Transient
failures and rate limiting are never raised directly; they drive the retry
loop and are replaced by one of the errors below once the loop gives up.

Every error carries the last response seen (if any) and the number of
attempts made, so callers can inspect what the server actually said.
"""

from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    import httpx


class RetryableError(Exception):
    """
    Base exception for all retryable client errors.

    Attributes:
        message: Human readable description
        response: Last response received before giving up (may be None)
        attempts: Number of attempts made for the call (None if unknown)
        details: Extra structured context for logging
    """

    def __init__(
        self,
        message: str,
        *,
        response: Optional["httpx.Response"] = None,
        attempts: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.response = response
        self.attempts = attempts
        self.details = details or {}


class MaxAttemptsReached(RetryableError):
    """
    Raised when the attempt budget is used up without a successful response.

    Permanent: no outer retry wrapper should retry this call again.
    """

    def __init__(self, count: int, **kwargs: Any):
        self.count = count
        kwargs.setdefault("attempts", count)
        super().__init__(f"Request failed {count} times", **kwargs)


class ElapsedTimeExceeded(RetryableError):
    """
    Raised when waiting for the next attempt would exceed MAX_ELAPSED_TIME.
    """

    def __init__(self, max_elapsed_time: float, elapsed: float, **kwargs: Any):
        self.max_elapsed_time = max_elapsed_time
        self.elapsed = elapsed
        super().__init__(
            f"Retry budget of {max_elapsed_time}s exceeded after {elapsed:.3f}s",
            **kwargs,
        )


class PermanentFailure(RetryableError):
    """
    Raised for outcomes that retrying cannot fix.

    Examples:
    - Redirect loops
    - Untrusted TLS certificates
    - Client errors (4xx) other than 429
    """

    def __init__(self, message: str, *, cause: Optional[BaseException] = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.cause = cause


class RetryableIOError(RetryableError, OSError):
    """
    IOError kind: a malformed protocol element or an unreadable input.

    Never retried, a malformed value is not assumed to self-heal.
    """


class MalformedRetryAfterError(RetryableIOError):
    """Raised when a 429 response carries a Retry-After that is not delta-seconds."""

    def __init__(self, value: str, **kwargs: Any):
        self.value = value
        super().__init__(f"Malformed Retry-After header: {value!r}", **kwargs)


class RequestBodyError(RetryableIOError):
    """Raised when a request body source cannot be fully read up front."""


class CallCancelled(RetryableError):
    """Raised when the call context is cancelled mid-attempt or mid-wait."""


class DeadlineExceeded(CallCancelled):
    """Raised when the call context deadline passes."""
