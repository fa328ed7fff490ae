"""Prometheus metrics for retryable HTTP calls.

Registered on the default prometheus_client registry; expose them with
``prometheus_client.start_http_server`` or your framework's /metrics route.
Alert rules worth configuring:
- http_calls_total{result!="success"} (calls giving up)
- http_attempts_total{outcome="rate_limited"} (upstream throttling)
"""

from prometheus_client import Counter, Histogram

# === Attempt Metrics ===

http_attempts_total = Counter(
    "retryable_http_attempts_total",
    "Total transport attempts by classified outcome",
    ["outcome"],
)
"""
Attempt counter by classified outcome.

Labels:
- outcome: success, permanent_failure, transient_failure, rate_limited,
  malformed_retry_after

A high transient_failure share with a low calls failure rate means retries
are absorbing upstream instability.
"""

# === Call Metrics ===

http_calls_total = Counter(
    "retryable_http_calls_total",
    "Total retried calls by terminal result",
    ["result"],
)
"""
Call counter by terminal result.

Labels:
- result: success, permanent_failure, max_attempts_reached,
  elapsed_time_exceeded, cancelled, malformed_retry_after
"""

# === Timing Metrics ===

http_retry_wait_seconds = Histogram(
    "retryable_http_retry_wait_seconds",
    "Time slept between attempts in seconds",
    ["reason"],
    buckets=[0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0],
)
"""
Inter-attempt wait histogram.

Labels:
- reason: backoff (transient failure), rate_limited (429)
"""

http_success_duration_seconds = Histogram(
    "retryable_http_success_duration_seconds",
    "Duration of the successful attempt in seconds",
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)
