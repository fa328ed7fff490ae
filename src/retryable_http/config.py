"""
Configuration settings for retryable HTTP calls.

All settings are loaded from environment variables (prefixed RETRYABLE_)
with sensible defaults. Use .env file for local development.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Retry policy and transport settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="RETRYABLE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Logging ===
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"  # "production" switches to JSON logs

    # === Retry Policy ===
    MAX_RETRIES: int = Field(default=9, ge=0)  # 10 total attempts; 0 = bounded by time only
    MAX_INTERVAL: float = Field(default=30.0, gt=0)  # seconds, caps each backoff delay
    MAX_ELAPSED_TIME: float = Field(default=0.0, ge=0)  # seconds, 0 = never give up on time
    DEFAULT_RETRY_AFTER: float = Field(default=1.0, ge=0)  # seconds, 429 without Retry-After

    # === Exponential Backoff ===
    INITIAL_INTERVAL: float = Field(default=0.5, gt=0)  # seconds
    MULTIPLIER: float = Field(default=1.5, ge=1)
    RANDOMIZATION_FACTOR: float = Field(default=0.5, ge=0, le=1)

    # === Transport ===
    REQUEST_TIMEOUT: float = Field(default=30.0, gt=0)  # seconds, per attempt
    MAX_REDIRECTS: int = Field(default=10, ge=0)
    VERIFY_TLS: bool = True
    TRUST_ENV: bool = True  # honour HTTP(S)_PROXY / NO_PROXY


# Global settings instance, the default for executors, transports and clients
settings = Settings()
