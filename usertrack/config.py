"""Client configuration using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

# Reported by the platform when the advertising identifier is unavailable
UNAVAILABLE_ADVERTISING_ID = "00000000-0000-0000-0000-000000000000"


class Settings(BaseSettings):
    """Client settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="USERTRACK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    env: Literal["development", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Tracking API
    api_base_url: str = "https://staging.data.lascade.com/api/v1"
    request_timeout_seconds: float = 30.0

    # App
    app_code: str = "d1_ios_flight"
    app_name: str = "D2Flight"
    app_version: str = "1.02"
    build_number: str = "1"

    # Locale defaults
    default_country_code: str = "IN"
    default_currency_code: str = "INR"
    default_language_code: str = "en-GB"

    # User and session creation
    default_acquired_route: str = "unknown"
    default_session_type: str = "api"
    default_session_route: str = "unknown"
    launch_vertical: Literal["flight", "hotel", "car", "general"] = "flight"

    # Local identity storage
    storage_backend: Literal["memory", "file", "redis"] = "file"
    storage_path: str = ".usertrack/identity.json"
    storage_key_prefix: str = "D2Flight_"
    redis_url: str | None = None

    # Platform overrides (device identifiers are not available to a plain process)
    advertising_id: str | None = None
    vendor_id: str | None = None
    region_code: str | None = None

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.env == "production"

    @property
    def is_test(self) -> bool:
        """Check if running in test mode."""
        return self.env == "test"

    @property
    def full_app_version(self) -> str:
        """Version plus build number, e.g. ``1.02 (1)``."""
        return f"{self.app_version} ({self.build_number})"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
