"""Shared test fixtures and configuration for all tests.

This conftest.py provides common fixtures used across unit and integration tests.
"""

import pytest

from retryable_http.config import Settings


@pytest.fixture
def test_settings() -> Settings:
    """Test settings with fast, deterministic backoff.

    Override specific settings in individual tests as needed:
        def test_something(test_settings):
            test_settings.MAX_RETRIES = 2
    """
    return Settings(
        # === Logging ===
        LOG_LEVEL="DEBUG",
        ENVIRONMENT="development",

        # === Retry Policy ===
        MAX_RETRIES=9,
        MAX_INTERVAL=0.01,
        MAX_ELAPSED_TIME=0.0,
        DEFAULT_RETRY_AFTER=0.01,

        # === Exponential Backoff ===
        INITIAL_INTERVAL=0.001,
        MULTIPLIER=1.5,
        RANDOMIZATION_FACTOR=0.0,

        # === Transport ===
        REQUEST_TIMEOUT=5.0,
        MAX_REDIRECTS=10,
        TRUST_ENV=False,  # Never route test traffic through a proxy
    )
