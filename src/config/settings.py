"""
Application settings with Pydantic v2 validation.

Loads configuration from environment variables with sensible defaults.
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ApiSettings(BaseSettings):
    """Remote inventory/sales API configuration."""

    model_config = SettingsConfigDict(env_prefix="API_")

    # Tried in order, first 2xx wins
    candidate_urls: list[str] = [
        "http://192.168.0.12:8000/api",
        "http://localhost:8000/api",
        "http://127.0.0.1:8000/api",
    ]
    probe_resource: str = "products"
    probe_timeout: float = Field(default=5.0, gt=0)
    request_timeout: float = Field(default=10.0, gt=0)
    user_agent: str = "storefront-client/1.0"

    @field_validator("candidate_urls")
    @classmethod
    def strip_trailing_slash(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("at least one candidate URL is required")
        return [url.rstrip("/") for url in v]


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Storefront Client"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    api: ApiSettings = Field(default_factory=ApiSettings)


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings (for testing)."""
    global _settings
    _settings = None
