"""
Configuration Management for fintrack

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Storage location, hashing cost and dashboard constants all live in one
place and are validated at startup.
"""

from decimal import Decimal
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """SQLite storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FINTRACK_DB_",
        extra="ignore"
    )

    path: str = Field(
        default="local.db",
        description="Path to the SQLite database file"
    )
    timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="How long a connection waits on a locked database"
    )

    # Connection retry policy
    connect_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts to open the database before giving up"
    )
    connect_wait_seconds: float = Field(
        default=0.5,
        ge=0.0,
        description="Wait between connection attempts"
    )


class SecuritySettings(BaseSettings):
    """Password policy and hashing cost."""

    model_config = SettingsConfigDict(
        env_prefix="FINTRACK_SECURITY_",
        extra="ignore"
    )

    password_min_length: int = Field(
        default=8,
        ge=1,
        description="Minimum password length accepted at sign-up"
    )
    hash_iterations: int = Field(
        default=200_000,
        ge=1_000,
        description="PBKDF2 iteration count for new password hashes"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Dashboard
    starting_balance: Decimal = Field(
        default=Decimal("24650.80"),
        description="Placeholder opening balance the running balance starts from"
    )
    trailing_months: int = Field(
        default=6,
        ge=1,
        le=24,
        description="Number of months in the dashboard spending series"
    )
    recent_transactions_limit: int = Field(
        default=3,
        ge=0,
        le=50,
        description="How many transactions the dashboard lists as recent"
    )
    currency_symbol: str = Field(
        default="$",
        max_length=3,
        description="Symbol shown in front of amounts"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Minimum level for local structured logs"
    )
    json_logs: bool = Field(
        default=True,
        description="Render logs as JSON (otherwise console format)"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Only accept standard logging level names."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def database(self) -> DatabaseSettings:
        return DatabaseSettings()

    @property
    def security(self) -> SecuritySettings:
        return SecuritySettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus a
    "<name>_error" entry for each section that failed.
    """
    results = {}

    settings = get_settings()

    for name in ("database", "security", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
