"""Tests for configuration loading."""

from decimal import Decimal

import pytest

from fintrack.config import (
    AppSettings,
    DatabaseSettings,
    SecuritySettings,
    get_settings,
    validate_all_settings,
)


class TestSettings:
    """Tests for the settings classes."""

    def test_defaults(self, monkeypatch):
        """Test the defaults the app ships with."""
        monkeypatch.delenv("STARTING_BALANCE", raising=False)
        assert DatabaseSettings().path == "local.db"
        assert SecuritySettings().password_min_length == 8
        assert AppSettings(_env_file=None).starting_balance == Decimal("24650.80")
        assert AppSettings(_env_file=None).trailing_months == 6

    def test_database_path_from_env(self, monkeypatch):
        """Test the FINTRACK_DB_ prefix."""
        monkeypatch.setenv("FINTRACK_DB_PATH", "/tmp/other.db")
        monkeypatch.setenv("FINTRACK_DB_CONNECT_ATTEMPTS", "5")
        settings = DatabaseSettings()
        assert settings.path == "/tmp/other.db"
        assert settings.connect_attempts == 5

    def test_security_from_env(self, monkeypatch):
        """Test the FINTRACK_SECURITY_ prefix."""
        monkeypatch.setenv("FINTRACK_SECURITY_PASSWORD_MIN_LENGTH", "12")
        assert SecuritySettings().password_min_length == 12

    def test_hash_iterations_floor(self, monkeypatch):
        """Test that a too-cheap hash cost is refused."""
        monkeypatch.setenv("FINTRACK_SECURITY_HASH_ITERATIONS", "10")
        with pytest.raises(ValueError):
            SecuritySettings()

    def test_log_level_normalized(self):
        """Test that log levels are upper-cased and checked."""
        assert AppSettings(_env_file=None, log_level="debug").log_level == "DEBUG"
        with pytest.raises(ValueError):
            AppSettings(_env_file=None, log_level="loud")

    def test_get_settings_is_cached(self):
        """Test that get_settings returns the same object."""
        assert get_settings() is get_settings()

    def test_validate_all_settings(self):
        """Test the status report used by the settings page."""
        status = validate_all_settings()
        assert status["database"] is True
        assert status["security"] is True
        assert status["app"] is True

    def test_no_unused_environment_switches(self):
        """Test that only settings the app reads are declared."""
        assert "app_environment" not in AppSettings.model_fields
        assert "debug_mode" not in AppSettings.model_fields
