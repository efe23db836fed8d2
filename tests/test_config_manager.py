"""
Configuration Manager Tests
---------------------------
Test settings loading, secret validation and derived properties.
"""

import pytest
from pydantic import ValidationError

from trustgate.core.config_manager import ApplicationSettings, load_settings

ACCESS = "config-test-access-secret-1"
REFRESH = "config-test-refresh-secret-2"


class TestApplicationSettings:
    """Test ApplicationSettings validation."""

    def test_defaults(self):
        """Test defaults for token lifetimes and the database."""
        settings = ApplicationSettings(
            access_token_secret=ACCESS, refresh_token_secret=REFRESH, _env_file=None
        )

        assert settings.jwt_algorithm == "HS256"
        assert settings.access_token_expire_minutes == 15
        assert settings.refresh_token_expire_days == 7
        assert settings.access_token_expire_seconds == 900
        assert settings.revocation_retention_seconds == 7 * 24 * 3600

    def test_missing_secrets(self, monkeypatch):
        """Test settings refuse to load without token secrets."""
        monkeypatch.delenv("ACCESS_TOKEN_SECRET", raising=False)
        monkeypatch.delenv("REFRESH_TOKEN_SECRET", raising=False)

        with pytest.raises(ValidationError):
            ApplicationSettings(_env_file=None)

    def test_equal_secrets(self):
        """Test settings refuse identical access and refresh secrets."""
        with pytest.raises(ValidationError, match="distinct"):
            ApplicationSettings(
                access_token_secret=ACCESS, refresh_token_secret=ACCESS, _env_file=None
            )

    def test_short_secret(self):
        """Test secrets shorter than 16 characters are rejected."""
        with pytest.raises(ValidationError):
            ApplicationSettings(
                access_token_secret="short", refresh_token_secret=REFRESH, _env_file=None
            )

    def test_invalid_algorithm(self):
        """Test asymmetric or unknown algorithms are rejected."""
        with pytest.raises(ValidationError, match="JWT algorithm"):
            ApplicationSettings(
                access_token_secret=ACCESS,
                refresh_token_secret=REFRESH,
                jwt_algorithm="RS256",
                _env_file=None,
            )

    def test_log_level_normalized(self):
        """Test log level is upper-cased."""
        settings = ApplicationSettings(
            access_token_secret=ACCESS,
            refresh_token_secret=REFRESH,
            log_level="debug",
            _env_file=None,
        )

        assert settings.log_level == "DEBUG"

    def test_invalid_bcrypt_rounds(self):
        """Test bcrypt cost outside 4..31 is rejected."""
        with pytest.raises(ValidationError, match="bcrypt_rounds"):
            ApplicationSettings(
                access_token_secret=ACCESS,
                refresh_token_secret=REFRESH,
                bcrypt_rounds=3,
                _env_file=None,
            )

    def test_database_url(self):
        """Test database URL uses the asyncpg driver."""
        settings = ApplicationSettings(
            access_token_secret=ACCESS,
            refresh_token_secret=REFRESH,
            database_user="u",
            database_password="p",
            database_host="db",
            database_port=5433,
            database_name="kyc",
            _env_file=None,
        )

        assert settings.database_url == "postgresql+asyncpg://u:p@db:5433/kyc"

    def test_load_settings_from_environment(self):
        """Test load_settings reads secrets from the environment."""
        settings = load_settings()

        assert settings.access_token_secret != settings.refresh_token_secret
        assert settings.bcrypt_rounds == 4
