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


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    name: str = Field(
        "Password Reset Guard",
        description="Application title shown in OpenAPI docs",
    )
    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class ResetSettings(BaseSettings):
    """Password reset throttling and token issuance configuration."""

    max_attempts: int = Field(
        1,
        description="Reset-link requests allowed per identity within one decay window",
        ge=1,
    )
    decay_seconds: int = Field(
        60,
        description="Length of the rate limiter window opened by the first request",
        ge=1,
    )
    attempt_ttl_minutes: int = Field(
        30,
        description="Sliding expiry of the per-identity attempt counter",
        ge=1,
    )
    attempt_ceiling: int | None = Field(
        None,
        description=(
            "Optional secondary limit on the attempt counter. When unset the counter "
            "is only recorded and logged."
        ),
        ge=1,
    )
    store_max_entries: int | None = Field(
        10_000,
        description="Maximum number of counters kept by the in-memory store",
    )
    limiter_max_keys: int | None = Field(
        10_000,
        description="Maximum number of open rate limiter windows kept in memory",
    )
    secret_key: str = Field(
        ...,
        description="Secret used to sign password reset tokens",
        min_length=16,
    )
    token_ttl_minutes: int = Field(
        60,
        description="Lifetime of an issued password reset token",
        ge=1,
    )
    url_base: str = Field(
        "http://localhost:8000/reset-password",
        description="Front-end URL the reset link points to",
    )

    model_config = SettingsConfigDict(
        env_prefix="RESET_",
        case_sensitive=False,
    )


class CaptchaSettings(BaseSettings):
    """Human-verification challenge provider configuration."""

    provider: str = Field(
        "turnstile",
        description="Challenge provider name (currently: turnstile)",
    )
    secret_key: str | None = Field(
        None,
        description="Provider secret used to verify challenge tokens",
    )
    verify_url: str = Field(
        "https://challenges.cloudflare.com/turnstile/v0/siteverify",
        description="Verification endpoint of the provider",
    )
    timeout_seconds: float = Field(
        5.0,
        description="Verification request timeout in seconds",
    )

    model_config = SettingsConfigDict(
        env_prefix="CAPTCHA_",
        case_sensitive=False,
    )


class MailSettings(BaseSettings):
    """Outgoing mail configuration for reset-link delivery."""

    driver: str = Field(
        "log",
        description="Mail driver: 'log' (write to application log) or 'brevo'",
    )
    api_key: str | None = Field(
        None,
        description="API key for the transactional mail provider",
    )
    api_url: str = Field(
        "https://api.brevo.com/v3/smtp/email",
        description="Transactional mail endpoint",
    )
    from_email: str = Field(
        "no-reply@example.com",
        description="Sender address for reset e-mails",
    )
    from_name: str = Field(
        "Support",
        description="Sender display name for reset e-mails",
    )
    timeout_seconds: float = Field(
        10.0,
        description="Mail API request timeout in seconds",
    )

    model_config = SettingsConfigDict(
        env_prefix="MAIL_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="Log format: 'json' or 'plain'")
    output: str = Field("stdout", description="Log output: 'stdout' or 'file'")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(
        10 * 1024 * 1024,
        description="Rotate the log file at this size (0 disables rotation)",
    )
    backup_count: int = Field(5, description="Rotated log files to keep")
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header used to read and echo the request correlation id",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


def _build_reset_settings() -> ResetSettings:
    """Build reset settings from environment.

    Pydantic Settings (v2) can populate values from environment variables.
    However, static type checkers often treat required fields as required
    constructor arguments, which is not how BaseSettings is intended to be used.
    """

    return ResetSettings()  # type: ignore[call-arg]


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Raises validation errors on startup if required settings are missing.
    """

    app_env: str = APP_ENV
    app: AppSettings = Field(default_factory=AppSettings)
    reset: ResetSettings = Field(default_factory=_build_reset_settings)
    captcha: CaptchaSettings = Field(default_factory=CaptchaSettings)
    mail: MailSettings = Field(default_factory=MailSettings)
    log: LogSettings = Field(default_factory=LogSettings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance - composed from domain-specific settings
# Nested settings are created via default_factory so env loading works.
settings = Settings()
