"""Configuration module."""

from src.config.logging import configure_logging, get_logger
from src.config.settings import ApiSettings, Settings, get_settings, reset_settings

__all__ = [
    "ApiSettings",
    "Settings",
    "get_settings",
    "reset_settings",
    "configure_logging",
    "get_logger",
]
