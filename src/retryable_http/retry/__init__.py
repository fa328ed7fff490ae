"""
Retry executor with outcome classification and backoff.

This module turns a single transport call into a resilient call:

1. **Classify**: every attempt becomes success, permanent failure,
   transient failure, or rate limited (429)
2. **Backoff**: transient failures wait per an exponential backoff policy
   capped at MAX_INTERVAL
3. **Rate limiting**: 429s reset the backoff and wait for Retry-After
4. **Budget**: calls stop after MAX_RETRIES + 1 attempts or MAX_ELAPSED_TIME

Main Components:
    - RetryExecutor: Drives the attempt loop
    - classify: Pure outcome classification for one attempt
    - ExponentialBackOff: Default backoff policy
    - BackOffPolicy: Protocol for custom backoff policies

Usage:
    >>> from retryable_http.retry import RetryExecutor
    >>> executor = RetryExecutor(transport, settings)
    >>> response = await executor.execute(request, ctx)
"""

from retryable_http.retry.backoff import BackOffPolicy, ExponentialBackOff
from retryable_http.retry.classifier import (
    Outcome,
    OutcomeKind,
    classify,
    parse_retry_after,
)
from retryable_http.retry.engine import RetryExecutor

__all__ = [
    "RetryExecutor",
    "BackOffPolicy",
    "ExponentialBackOff",
    "Outcome",
    "OutcomeKind",
    "classify",
    "parse_retry_after",
]
