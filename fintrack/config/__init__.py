"""Configuration package."""

from fintrack.config.settings import (
    AppSettings,
    DatabaseSettings,
    SecuritySettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "DatabaseSettings",
    "SecuritySettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
