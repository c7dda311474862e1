"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Map environments to their respective .env files (relative to PROJECT_ROOT)
ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

# Select the .env file for the current environment
_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Load .env file early to populate os.environ before creating nested settings
# This is necessary because Pydantic nested BaseSettings don't inherit env_file
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


def _build_app_settings() -> "AppSettings":
    """Build app settings from environment.

    Pydantic Settings (v2) can populate values from environment variables.
    However, static type checkers often treat required fields as required
    constructor arguments, which is not how BaseSettings is intended to be used.
    """

    return AppSettings()  # type: ignore[call-arg]


def _build_storage_settings() -> "StorageSettings":
    return StorageSettings()  # type: ignore[call-arg]


def _build_speech_settings() -> "SpeechSettings":
    return SpeechSettings()  # type: ignore[call-arg]


def _build_log_settings() -> "LogSettings":
    return LogSettings()  # type: ignore[call-arg]


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )
    trust_proxy: bool = Field(
        False,
        description="Derive the client address from the first X-Forwarded-For hop",
    )

    rate_limit_enabled: bool = Field(
        True,
        description="Enable per-client rate limiting",
    )
    rate_limit_window_seconds: int = Field(
        60,
        description="Rate limit window size in seconds (shared by all limiters)",
        ge=1,
    )
    rate_limit_api_max_requests: int = Field(
        100,
        description="Maximum requests per window for any /api route (per client)",
        ge=1,
    )
    rate_limit_transcription_max_requests: int = Field(
        10,
        description="Maximum transcription creations per window (per client)",
        ge=1,
    )
    rate_limit_sweep_interval_seconds: float = Field(
        60.0,
        description="Interval between background purges of expired limiter entries",
        gt=0,
    )
    rate_limit_include_headers: bool = Field(
        True,
        description="Include X-RateLimit-* and Retry-After headers when throttling",
    )

    recent_days: int = Field(
        30,
        description="Default look-back window (days) when listing transcriptions",
        ge=1,
    )

    audio_download_enabled: bool = Field(
        False,
        description="Fetch audio over HTTP; when false the download is simulated",
    )
    audio_max_bytes: int = Field(
        25 * 1024 * 1024,
        description="Maximum accepted audio payload size in bytes",
        ge=1,
    )
    audio_download_timeout_seconds: float = Field(
        30.0,
        description="Timeout for a single audio download attempt",
        gt=0,
    )

    retry_max_attempts: int = Field(
        3,
        description="Attempts for external calls (audio download, speech provider)",
        ge=1,
    )
    retry_initial_delay_ms: int = Field(
        1000,
        description="Initial backoff delay in milliseconds, doubled after each failure",
        ge=0,
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class StorageSettings(BaseSettings):
    """Document store configuration."""

    backend: str = Field(
        "memory",
        description="Transcription store backend: memory or mongodb",
    )
    mongodb_uri: str = Field(
        "mongodb://localhost:27017/transcriptions",
        description="MongoDB connection string (mongodb backend only)",
    )
    max_pool_size: int = Field(10, ge=1)
    min_pool_size: int = Field(2, ge=0)
    server_selection_timeout_ms: int = Field(5000, ge=1)

    model_config = SettingsConfigDict(
        env_prefix="STORAGE_",
        case_sensitive=False,
    )


class SpeechSettings(BaseSettings):
    """Speech-to-text provider configuration.

    Validation of provider-specific requirements happens in the factory.
    """

    provider: str = Field(
        "mock",
        description="Speech provider name (mock, openai)",
    )
    api_key: str | None = Field(
        None,
        description="API key for cloud providers (required for openai)",
    )
    model: str = Field(
        "whisper-1",
        description="Transcription model name",
    )
    base_url: str | None = Field(
        None,
        description="Custom API endpoint for OpenAI-compatible servers",
    )
    timeout_seconds: float = Field(
        45.0,
        description="Request timeout in seconds",
    )

    model_config = SettingsConfigDict(
        env_prefix="SPEECH_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="Log format: json or plain")
    output: str = Field("stdout", description="Log output: stdout or file")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(
        10 * 1024 * 1024,
        description="Rotate the log file at this size (0 disables rotation)",
        ge=0,
    )
    backup_count: int = Field(5, ge=0)
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header used to accept and echo request correlation ids",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Raises validation errors on startup if settings are invalid.

    Environments:
    - development: Local development (DEBUG=true)
    - testing: Automated tests (uses .env.testing)
    - staging: Pre-production (uses .env.staging)
    - production: Production deployment (uses .env.production)
    """

    app_env: str = APP_ENV
    app: AppSettings = Field(default_factory=_build_app_settings)
    storage: StorageSettings = Field(default_factory=_build_storage_settings)
    speech: SpeechSettings = Field(default_factory=_build_speech_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance - composed from domain-specific settings
# Nested settings are created via default_factory so env loading works.
settings = Settings()
