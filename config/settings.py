"""
Settings Module for Site Monitor

Configuration management using Pydantic Settings.
Supports environment variables, .env files, and runtime overrides.
Includes validation, type checking, and sensible defaults.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional
from enum import Enum

from pydantic import (
    AliasChoices,
    Field,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environment enumeration."""
    DEVELOPMENT = "development"
    PRODUCTION = "production"


class LogLevel(str, Enum):
    """Logging level enumeration."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """File log output format."""
    TEXT = "text"
    JSON = "json"


class BaseSettingsConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_default=True
    )


class ServerSettings(BaseSettingsConfig):
    """
    HTTP API Server Settings

    The listening port comes from the PORT environment variable
    (SERVER_PORT is accepted too). It has no default: the process
    refuses to start without it.
    """

    model_config = SettingsConfigDict(
        env_prefix="SERVER_",
        env_file=".env",
        extra="ignore",
        populate_by_name=True
    )

    host: str = Field(
        default="0.0.0.0",
        description="Address the API server binds to"
    )
    port: Optional[int] = Field(
        default=None,
        ge=1,
        le=65535,
        validation_alias=AliasChoices("PORT", "SERVER_PORT"),
        description="Port the API server listens on"
    )
    keepalive_timeout: float = Field(
        default=60.0,
        gt=0,
        description="Idle keep-alive timeout for client connections in seconds"
    )
    shutdown_timeout: float = Field(
        default=5.0,
        gt=0,
        description="Grace period for open connections on shutdown in seconds"
    )

    # CORS
    cors_allow_origin: str = Field(
        default="*",
        description="Value of Access-Control-Allow-Origin"
    )
    cors_allow_methods: str = Field(
        default="GET, POST, PUT, DELETE, OPTIONS",
        description="Value of Access-Control-Allow-Methods"
    )
    cors_allow_headers: str = Field(
        default="Content-Type",
        description="Value of Access-Control-Allow-Headers"
    )


class MonitoringSettings(BaseSettingsConfig):
    """
    Monitoring Engine Settings

    Controls the probing cadence, the per-request timeout and
    the HTTP client behaviour used by every probe.
    """

    model_config = SettingsConfigDict(
        env_prefix="MONITOR_",
        env_file=".env",
        extra="ignore"
    )

    sites_file: Path = Field(
        default=Path("config/sites.json"),
        description="JSON file holding the list of sites to probe"
    )
    check_interval: float = Field(
        default=60.0,
        gt=0,
        le=86400,
        description="Seconds between two probing cycles"
    )
    request_timeout: float = Field(
        default=10.0,
        gt=0,
        le=300,
        description="Per-request timeout in seconds (whole exchange)"
    )
    follow_redirects: bool = Field(
        default=True,
        description="Follow HTTP redirects before classifying the response"
    )
    max_redirects: int = Field(
        default=10,
        ge=0,
        le=50,
        description="Maximum number of redirects to follow"
    )
    verify_ssl: bool = Field(
        default=True,
        description="Verify TLS certificates of probed sites"
    )
    user_agent: str = Field(
        default="SiteMonitor/1.0",
        min_length=1,
        description="User-Agent header sent with every probe"
    )
    stop_grace_period: Optional[float] = Field(
        default=None,
        gt=0,
        description=(
            "How long stop() waits for an in-flight cycle before cancelling it. "
            "Defaults to request_timeout + 5 seconds."
        )
    )

    @model_validator(mode="after")
    def default_grace_period(self) -> "MonitoringSettings":
        """Derive the stop grace period from the request timeout."""
        if self.stop_grace_period is None:
            self.stop_grace_period = self.request_timeout + 5.0
        return self


class LoggingSettings(BaseSettingsConfig):
    """
    Logging Configuration Settings

    Console and file sinks for loguru.
    """

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        extra="ignore"
    )

    level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Minimum log level"
    )
    to_console: bool = Field(
        default=True,
        description="Write logs to stdout"
    )
    colorize: bool = Field(
        default=True,
        description="Colorize console output"
    )
    to_file: bool = Field(
        default=False,
        description="Also write logs to a rotating file"
    )
    file_path: Path = Field(
        default=Path("logs/site_monitor.log"),
        description="Log file path"
    )
    format: LogFormat = Field(
        default=LogFormat.TEXT,
        description="File log format: text or json"
    )
    rotation: str = Field(
        default="10 MB",
        description="Rotation policy for the log file"
    )
    retention: int = Field(
        default=5,
        ge=1,
        description="Number of rotated log files to keep"
    )

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: Any) -> Any:
        """Accept lowercase level names from the environment."""
        if isinstance(v, str):
            return v.upper()
        return v

    @property
    def errors_file_path(self) -> Path:
        """Separate file that only receives ERROR and above."""
        return self.file_path.with_name("errors.log")


class Settings(BaseSettingsConfig):
    """
    Main Settings Class

    Aggregates all settings sections and provides the main
    configuration interface for the application.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment"
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Application info
    app_name: str = Field(
        default="Site Monitor",
        description="Application name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )

    # Nested settings
    server: ServerSettings = Field(
        default_factory=ServerSettings
    )
    monitoring: MonitoringSettings = Field(
        default_factory=MonitoringSettings
    )
    logging: LoggingSettings = Field(
        default_factory=LoggingSettings
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == Environment.PRODUCTION

    @model_validator(mode="after")
    def configure_for_environment(self) -> "Settings":
        """Apply environment-specific configuration."""
        if self.is_production:
            self.debug = False
            self.logging.colorize = False

        elif self.debug and self.logging.level == LogLevel.INFO:
            self.logging.level = LogLevel.DEBUG

        return self

    def to_dict(self) -> Dict[str, Any]:
        """Convert settings to a JSON-friendly dictionary."""
        return self.model_dump(mode="json")


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    This function is cached to ensure a single settings instance
    is used throughout the application lifecycle.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
