"""Monitoring and metrics instrumentation for retryable HTTP calls.

Exports Prometheus metrics for operational monitoring and alerting.
"""

from retryable_http.monitoring.metrics import (
    http_attempts_total,
    http_calls_total,
    http_retry_wait_seconds,
    http_success_duration_seconds,
)

__all__ = [
    "http_attempts_total",
    "http_calls_total",
    "http_retry_wait_seconds",
    "http_success_duration_seconds",
]
