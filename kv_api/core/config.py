"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

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

_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Load .env file early to populate os.environ before creating nested settings
# This is necessary because Pydantic nested BaseSettings don't inherit env_file
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


class AdmissionSettings(BaseSettings):
    """Sliding-window admission control configuration."""

    max_per_window: int = Field(
        3,
        description="Maximum requests accepted per trailing window; 0 or negative disables admission control",
    )
    window_ms: int = Field(
        1000,
        description="Trailing window length in milliseconds",
        ge=1,
    )
    clock: Literal["wall", "monotonic"] = Field(
        "wall",
        description="Clock source used to timestamp arrivals",
    )
    include_headers: bool = Field(
        True,
        description="Include Retry-After and X-RateLimit-* headers on rejected requests",
    )

    model_config = SettingsConfigDict(
        env_prefix="ADMISSION_",
        case_sensitive=False,
    )


class StoreSettings(BaseSettings):
    """Key-value storage backend configuration."""

    backend: Literal["memory", "sqlite"] = Field(
        "memory",
        description="Storage backend for key-value records",
    )
    sqlite_path: str = Field(
        "data/kv.sqlite3",
        description="Database file used by the sqlite backend",
    )
    allow_list_all: bool = Field(
        True,
        description="Expose GET /kv returning every stored record",
    )

    model_config = SettingsConfigDict(
        env_prefix="KV_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging configuration."""

    level: str = Field("INFO", description="Root log level")
    format: Literal["json", "plain"] = Field("json", description="Log line format")
    output: Literal["stdout", "file"] = Field("stdout", description="Log destination")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(
        10 * 1024 * 1024,
        description="Rotate the log file after this many bytes (0 disables rotation)",
    )
    backup_count: int = Field(5, description="Rotated log files to keep")
    max_value_chars: int = Field(
        512,
        description="Clip string fields in log lines to this many characters (0 disables clipping)",
        ge=0,
    )
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header used to receive and propagate the request id",
    )
    log_requests: bool = Field(
        True,
        description="Emit one access log line per handled request",
    )
    log_errors: bool = Field(
        True,
        description="Log every failed request with method, path and reason",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class ServerSettings(BaseSettings):
    """Bind address for the HTTP server."""

    host: str = Field("0.0.0.0", description="Interface to bind")
    port: int = Field(8080, description="TCP port to listen on")

    model_config = SettingsConfigDict(
        env_prefix="SERVER_",
        case_sensitive=False,
    )


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Raises validation errors on startup if settings are invalid.
    """

    app_env: str = APP_ENV
    app: AppSettings = Field(default_factory=AppSettings)
    admission: AdmissionSettings = Field(default_factory=AdmissionSettings)
    store: StoreSettings = Field(default_factory=StoreSettings)
    log: LogSettings = Field(default_factory=LogSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance - composed from domain-specific settings
# Nested settings are created via default_factory so env loading works.
settings = Settings()
