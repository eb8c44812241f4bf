"""
Module: settings.py
Description: Application configuration using pydantic-settings.

Configures the delivery queue client and the collector service from
environment variables with validation and defaults. Supports .env files
for local development.
"""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _validate_http_url(v: Optional[str], field_name: str) -> Optional[str]:
    if v is None:
        return v
    if not isinstance(v, str) or not v.strip():
        raise ValueError(f"{field_name} must be a non-empty string")
    v = v.strip()
    if not v.startswith(('http://', 'https://')):
        raise ValueError(f"{field_name} must be a valid HTTP/HTTPS URL")
    return v


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application settings
    app_name: str = Field(default="CYB Guide Action Log", description="Application name")
    app_version: str = Field(default="0.3.0", description="Application version")
    log_level: str = Field(default="INFO", description="Logging level")
    stage: str = Field(default="dev", description="Deployment stage")

    # Delivery endpoints
    log_endpoint: str = Field(
        default="http://127.0.0.1:8000/api/log-action",
        description="Primary collector endpoint for action log delivery"
    )
    fallback_endpoint: Optional[str] = Field(
        default=None,
        description="Optional secondary collector (e.g. a Sheets web app URL)"
    )
    delivery_timeout: float = Field(
        default=10.0,
        gt=0,
        le=60,
        description="HTTP timeout in seconds for delivery attempts"
    )

    # Retry settings
    max_retries: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Primary endpoint retries after the first attempt"
    )
    retry_delay: float = Field(
        default=1.0,
        ge=0,
        description="Base backoff delay in seconds (doubled per attempt)"
    )
    drain_pacing: float = Field(
        default=0.1,
        ge=0,
        description="Pause in seconds between queued entries during a drain"
    )
    startup_drain_delay: float = Field(
        default=1.0,
        ge=0,
        description="Delay before draining entries loaded at startup"
    )

    # Local queue storage
    queue_dir: str = Field(
        default=".actionlog",
        description="Directory holding the persisted offline queue"
    )
    queue_key: str = Field(
        default="cyb_log_queue",
        min_length=1,
        description="Storage key of the persisted offline queue"
    )

    # Connectivity monitoring
    connectivity_probe_url: Optional[str] = Field(
        default=None,
        description="URL polled to detect connectivity changes"
    )
    connectivity_interval: float = Field(
        default=15.0,
        gt=0,
        description="Seconds between connectivity probes"
    )

    # Collector settings
    collector_window: int = Field(
        default=500,
        ge=1,
        le=100000,
        description="Number of recent actions the collector keeps in memory"
    )

    @field_validator('log_endpoint')
    @classmethod
    def validate_log_endpoint(cls, v: str) -> str:
        """Validate the primary endpoint URL."""
        return _validate_http_url(v, 'log_endpoint')

    @field_validator('fallback_endpoint', 'connectivity_probe_url', mode='before')
    @classmethod
    def validate_optional_urls(cls, v: Optional[str], info) -> Optional[str]:
        """Treat empty strings as unset and validate the rest."""
        if isinstance(v, str) and not v.strip():
            return None
        return _validate_http_url(v, info.field_name)

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid logging level."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of: {', '.join(valid_levels)}")
        return v.upper()


# Global settings instance
settings = Settings()
