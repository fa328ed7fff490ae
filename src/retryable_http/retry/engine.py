"""
Retry executor for HTTP requests.

This module implements the RetryExecutor that turns a single "send a
request" transport call into a resilient call with exponential backoff,
429 rate-limit cooperation and bounded attempts.

Retry Policy:
    1. Success (2xx): return the response
    2. Permanent failure (redirect loop, untrusted cert, 4xx except 429): raise
    3. Transient failure (network error, 5xx): wait per backoff policy, retry
    4. Rate limited (429): reset backoff, wait Retry-After (or default), retry
    5. Budget exhausted (MAX_RETRIES + 1 attempts, or MAX_ELAPSED_TIME): raise

Usage:
    executor = RetryExecutor(transport, settings)
    ctx = new_context()
    response = await executor.execute(request, ctx)
"""

import asyncio
import time
from typing import Callable, Optional

import httpx
import structlog

from retryable_http.config import Settings, settings as default_settings
from retryable_http.context import CallContext
from retryable_http.exceptions import (
    CallCancelled,
    ElapsedTimeExceeded,
    MalformedRetryAfterError,
    MaxAttemptsReached,
    PermanentFailure,
)
from retryable_http.metadata import AttemptMetadata
from retryable_http.monitoring.metrics import (
    http_attempts_total,
    http_calls_total,
    http_retry_wait_seconds,
    http_success_duration_seconds,
)
from retryable_http.request import RetryableRequest
from retryable_http.retry.backoff import BackOffPolicy, ExponentialBackOff
from retryable_http.retry.classifier import OutcomeKind, classify
from retryable_http.transport.base_transport import BaseTransport

logger = structlog.get_logger(__name__)


class RetryExecutor:
    """
    Drives the attempt loop for a single logical call.

    Configuration attributes are read, never written, during a call, so one
    executor can serve many concurrent calls. Per-call state (backoff
    policy, attempt metadata) is never shared between calls.

    Attributes:
        transport: Transport used for every attempt
        max_retries: Retries after the first attempt (0 = no attempt bound)
        max_interval: Cap in seconds for each backoff delay
        max_elapsed_time: Wall-clock bound in seconds for the call (0 = none)
        default_retry_after: Wait in seconds for a 429 without Retry-After
    """

    def __init__(
        self,
        transport: BaseTransport,
        settings: Optional[Settings] = None,
        backoff_factory: Optional[Callable[[], BackOffPolicy]] = None,
    ):
        """
        Initialize retry executor.

        Args:
            transport: Transport used to send each attempt
            settings: Retry policy settings (defaults to the module-level settings)
            backoff_factory: Builds a fresh backoff policy per call; defaults
                to ExponentialBackOff configured from settings
        """
        self.settings = settings if settings is not None else default_settings
        self.transport = transport

        self.max_retries = self.settings.MAX_RETRIES
        self.max_interval = self.settings.MAX_INTERVAL
        self.max_elapsed_time = self.settings.MAX_ELAPSED_TIME
        self.default_retry_after = self.settings.DEFAULT_RETRY_AFTER

        self._backoff_factory = backoff_factory

        logger.info(
            "RetryExecutor initialized",
            transport=repr(transport),
            max_retries=self.max_retries,
            max_interval=self.max_interval,
            max_elapsed_time=self.max_elapsed_time,
        )

    def new_backoff(self) -> BackOffPolicy:
        """Build the backoff policy for one call."""
        if self._backoff_factory is not None:
            return self._backoff_factory()
        return ExponentialBackOff(
            initial_interval=self.settings.INITIAL_INTERVAL,
            multiplier=self.settings.MULTIPLIER,
            randomization_factor=self.settings.RANDOMIZATION_FACTOR,
            max_interval=self.max_interval,
        )

    async def execute(
        self,
        request: RetryableRequest,
        ctx: Optional[CallContext] = None,
    ) -> httpx.Response:
        """
        Send ``request`` until it succeeds, fails permanently, or the budget runs out.

        The context's attempt metadata (if any) is reset, then updated in
        place as the call progresses: attempts on every attempt start,
        success_duration on the successful attempt only.

        Args:
            request: Request to send; its body is replayed on every attempt
            ctx: Call context carrying metadata and cancellation. A context
                without metadata (or None) still works, the caller just
                cannot observe attempts afterwards.

        Returns:
            The successful (2xx) response

        Raises:
            PermanentFailure: Redirect loop, untrusted certificate, non-429 4xx
            MalformedRetryAfterError: 429 with a non delta-seconds Retry-After
            MaxAttemptsReached: MAX_RETRIES + 1 attempts all failed
            ElapsedTimeExceeded: Waiting again would exceed MAX_ELAPSED_TIME
            CallCancelled: The context was cancelled (DeadlineExceeded if its
                deadline passed)
        """
        ctx = ctx if ctx is not None else CallContext()
        metadata = ctx.metadata
        if metadata is None:
            metadata = AttemptMetadata()
        metadata.reset()

        policy = self.new_backoff()
        max_attempts = self.max_retries + 1 if self.max_retries > 0 else None
        call_start = time.monotonic()
        last_response: Optional[httpx.Response] = None

        log = logger.bind(method=request.method, url=str(request.url))

        while True:
            if ctx.cancelled:
                raise self._cancelled(ctx, metadata, last_response, log)

            metadata.attempts += 1
            log.debug("Starting attempt", attempt=metadata.attempts, max_attempts=max_attempts)

            attempt_start = time.monotonic()
            try:
                response, error = await self._attempt(ctx, request)
            except CallCancelled:
                raise self._cancelled(ctx, metadata, last_response, log) from None
            duration = time.monotonic() - attempt_start

            try:
                outcome = classify(error, response)
            except MalformedRetryAfterError as e:
                e.attempts = metadata.attempts
                http_attempts_total.labels(outcome="malformed_retry_after").inc()
                http_calls_total.labels(result="malformed_retry_after").inc()
                log.error(
                    "Malformed Retry-After header, giving up",
                    attempt=metadata.attempts,
                    retry_after=e.value,
                )
                raise

            http_attempts_total.labels(outcome=outcome.kind.value).inc()

            if outcome.kind is OutcomeKind.SUCCESS:
                metadata.success_duration = duration
                http_calls_total.labels(result="success").inc()
                http_success_duration_seconds.observe(duration)
                log.info(
                    "Request succeeded",
                    attempts=metadata.attempts,
                    status_code=outcome.response.status_code,
                    duration_ms=int(duration * 1000),
                )
                return outcome.response

            if response is not None:
                last_response = response

            if outcome.kind is OutcomeKind.PERMANENT_FAILURE:
                http_calls_total.labels(result="permanent_failure").inc()
                log.error(
                    "Permanent failure, not retrying",
                    attempt=metadata.attempts,
                    reason=outcome.reason,
                    error_type=type(outcome.error).__name__ if outcome.error else None,
                )
                raise PermanentFailure(
                    outcome.reason,
                    cause=outcome.error,
                    response=last_response,
                    attempts=metadata.attempts,
                ) from outcome.error

            if max_attempts is not None and metadata.attempts >= max_attempts:
                http_calls_total.labels(result="max_attempts_reached").inc()
                log.error(
                    "Max attempts reached",
                    attempts=metadata.attempts,
                    last_reason=outcome.reason,
                )
                raise MaxAttemptsReached(
                    metadata.attempts,
                    response=last_response,
                    details={"last_reason": outcome.reason},
                ) from outcome.error

            if outcome.kind is OutcomeKind.RATE_LIMITED:
                # A 429 says nothing about connection health, so growth restarts
                policy.reset()
                delay = outcome.wait_hint if outcome.wait_hint is not None else self.default_retry_after
                wait_reason = "rate_limited"
            else:
                delay = policy.next_delay()
                wait_reason = "backoff"

            elapsed = time.monotonic() - call_start
            if self.max_elapsed_time > 0 and elapsed + delay > self.max_elapsed_time:
                http_calls_total.labels(result="elapsed_time_exceeded").inc()
                log.error(
                    "Max elapsed time exceeded",
                    attempts=metadata.attempts,
                    elapsed_ms=int(elapsed * 1000),
                    max_elapsed_time=self.max_elapsed_time,
                    last_reason=outcome.reason,
                )
                raise ElapsedTimeExceeded(
                    self.max_elapsed_time,
                    elapsed,
                    response=last_response,
                    attempts=metadata.attempts,
                    details={"last_reason": outcome.reason},
                ) from outcome.error

            log.warning(
                "Attempt failed, retrying",
                attempt=metadata.attempts,
                outcome=outcome.kind.value,
                reason=outcome.reason,
                wait_reason=wait_reason,
                delay_ms=int(delay * 1000),
            )
            http_retry_wait_seconds.labels(reason=wait_reason).observe(delay)
            await self._wait(ctx, delay)

    async def _attempt(
        self,
        ctx: CallContext,
        request: RetryableRequest,
    ) -> tuple[Optional[httpx.Response], Optional[Exception]]:
        """
        Run one transport call, racing it against context cancellation.

        Returns (response, None) or (None, transport_error).

        Raises:
            CallCancelled: The context finished before the transport did
        """
        send = asyncio.ensure_future(self.transport.send(request))
        waiter = asyncio.ensure_future(ctx.wait())
        try:
            done, _ = await asyncio.wait({send, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            send.cancel()
            raise
        finally:
            waiter.cancel()

        if send not in done:
            send.cancel()
            raise ctx.err() or CallCancelled("context cancelled")

        try:
            return send.result(), None
        except Exception as e:
            return None, e

    async def _wait(self, ctx: CallContext, delay: float) -> None:
        """Sleep for ``delay`` seconds, returning early if the context finishes."""
        if delay <= 0:
            return
        try:
            await asyncio.wait_for(ctx.wait(), timeout=delay)
        except asyncio.TimeoutError:
            pass

    def _cancelled(
        self,
        ctx: CallContext,
        metadata: AttemptMetadata,
        last_response: Optional[httpx.Response],
        log: structlog.stdlib.BoundLogger,
    ) -> CallCancelled:
        reason = ctx.err() or CallCancelled("context cancelled")
        http_calls_total.labels(result="cancelled").inc()
        log.warning("Call cancelled", attempts=metadata.attempts, reason=reason.message)
        return type(reason)(reason.message, response=last_response, attempts=metadata.attempts)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"max_retries={self.max_retries}, "
            f"max_interval={self.max_interval}s, "
            f"max_elapsed_time={self.max_elapsed_time}s)"
        )
