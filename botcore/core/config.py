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
if _env_file and os.getenv("TESTING") != "true":
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


class RateLimitSettings(BaseSettings):
    """Per-actor sliding window rate limit configuration."""

    enabled: bool = Field(
        True,
        description="Enable rate limiting of actor commands",
    )
    requests: int = Field(
        5,
        description="Maximum number of admitted requests per window (per actor)",
        ge=1,
    )
    window_seconds: float = Field(
        60.0,
        description="Sliding window length in seconds",
        gt=0,
    )

    model_config = SettingsConfigDict(
        env_prefix="RATE_LIMIT_",
        case_sensitive=False,
    )


class PlaybackSettings(BaseSettings):
    """Playback session defaults."""

    default_volume: float = Field(
        1.0,
        description="Volume assigned to newly created playback sessions",
        ge=0.0,
        le=1.0,
    )

    model_config = SettingsConfigDict(
        env_prefix="PLAYBACK_",
        case_sensitive=False,
    )


class BotSettings(BaseSettings):
    """Limits applied to user-supplied input."""

    max_input_chars: int = Field(
        2000,
        description="Maximum length of sanitized user input",
        ge=1,
    )
    max_filename_chars: int = Field(
        255,
        description="Maximum length of sanitized file names",
        ge=1,
    )

    model_config = SettingsConfigDict(
        env_prefix="BOT_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="Log format: json or plain")
    output: str = Field("stdout", description="Log output: stdout or file")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(
        10_000_000,
        description="Rotate the log file after this many bytes (0 disables rotation)",
        ge=0,
    )
    backup_count: int = Field(5, description="Rotated log files to keep", ge=0)

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Raises validation errors on startup if a setting is malformed.
    """

    app_env: str = APP_ENV
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)
    playback: PlaybackSettings = Field(default_factory=PlaybackSettings)
    bot: BotSettings = Field(default_factory=BotSettings)
    log: LogSettings = Field(default_factory=LogSettings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Default settings instance, used when no settings object is passed in.
settings = Settings()
