"""
Retryable HTTP calls with backoff, 429 cooperation and attempt metadata.

Wraps an httpx transport so that a single request is sent until it
succeeds, fails permanently, or runs out of attempts or time:
- Transient failures (network errors, 5xx) retried with exponential backoff
- 429 Too Many Requests honoured via Retry-After
- Redirect loops, untrusted certificates and other 4xx fail fast
- Attempt count and successful attempt duration exposed through a call context

Architecture: RetryExecutor (policy) + BaseTransport (one attempt) + CallContext (metadata, cancellation)
"""

__version__ = "0.1.0"

from retryable_http.client import RetryableClient, new_client
from retryable_http.config import Settings
from retryable_http.context import (
    CallContext,
    new_context,
    number_of_attempts_from_context,
    successful_request_duration_from_context,
)
from retryable_http.exceptions import (
    CallCancelled,
    DeadlineExceeded,
    ElapsedTimeExceeded,
    MalformedRetryAfterError,
    MaxAttemptsReached,
    PermanentFailure,
    RequestBodyError,
    RetryableError,
    RetryableIOError,
)
from retryable_http.metadata import AttemptMetadata
from retryable_http.request import RetryableRequest, new_request
from retryable_http.retry import RetryExecutor

__all__ = [
    "RetryableClient",
    "new_client",
    "RetryExecutor",
    "Settings",
    "CallContext",
    "new_context",
    "number_of_attempts_from_context",
    "successful_request_duration_from_context",
    "AttemptMetadata",
    "RetryableRequest",
    "new_request",
    "RetryableError",
    "MaxAttemptsReached",
    "ElapsedTimeExceeded",
    "PermanentFailure",
    "RetryableIOError",
    "MalformedRetryAfterError",
    "RequestBodyError",
    "CallCancelled",
    "DeadlineExceeded",
]
