"""
Unit tests for retryable-http.

Test individual components in isolation:
- Outcome classifier (status codes, transport errors, Retry-After parsing)
- Backoff policy (growth, cap, jitter, reset)
- Retry executor (attempt budget, 429 handling, elapsed time, cancellation)
- Call context and attempt metadata
- Replayable requests
- httpx transport (via httpx.MockTransport)
- Command line entry point
"""
