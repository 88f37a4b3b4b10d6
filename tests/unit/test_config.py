"""
Unit Tests - Configuration
Tests for application settings and config.
"""
import pytest
from pydantic import ValidationError


class TestSettings:
    """Tests for Settings configuration class."""

    def test_default_app_name(self):
        """Default app name should be set."""
        from stock_tracker.config import Settings
        settings = Settings(_env_file=None)
        assert settings.APP_NAME == "Stock Tracker"

    def test_environment_from_env(self):
        """Environment should come from env vars."""
        from stock_tracker.config import Settings
        settings = Settings(_env_file=None)
        # In test environment, this is set to 'testing' by conftest
        assert settings.APP_ENV == "testing"

    def test_quote_client_defaults(self):
        """Cache, quota and spacing defaults."""
        from stock_tracker.config import Settings
        settings = Settings(_env_file=None)
        assert settings.QUOTE_CACHE_TTL_SECONDS == 300.0
        assert settings.QUOTE_CACHE_MAX_ENTRIES == 100
        assert settings.DAILY_REQUEST_LIMIT == 250
        assert settings.MIN_DISPATCH_INTERVAL_SECONDS == 1.0
        assert settings.REQUEST_TIMEOUT_SECONDS == 30.0

    def test_provider_defaults(self):
        from stock_tracker.config import Settings
        settings = Settings(_env_file=None)
        assert settings.FINNHUB_BASE_URL == "https://finnhub.io/api/v1"
        assert settings.FINNHUB_API_KEY == "test-finnhub-key"

    def test_values_from_env(self, monkeypatch):
        """Numeric settings are parsed from environment strings."""
        from stock_tracker.config import Settings
        monkeypatch.setenv("DAILY_REQUEST_LIMIT", "60")
        monkeypatch.setenv("MIN_DISPATCH_INTERVAL_SECONDS", "0.5")
        settings = Settings(_env_file=None)
        assert settings.DAILY_REQUEST_LIMIT == 60
        assert settings.MIN_DISPATCH_INTERVAL_SECONDS == 0.5


class TestSettingsValidation:
    """Tests for field validators."""

    @pytest.mark.parametrize("field", [
        "QUOTE_CACHE_TTL_SECONDS",
        "QUOTE_CACHE_MAX_ENTRIES",
        "DAILY_REQUEST_LIMIT",
        "REQUEST_TIMEOUT_SECONDS",
    ])
    def test_must_be_positive(self, field):
        from stock_tracker.config import Settings
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **{field: 0})

    def test_zero_interval_allowed(self):
        from stock_tracker.config import Settings
        settings = Settings(_env_file=None, MIN_DISPATCH_INTERVAL_SECONDS=0)
        assert settings.MIN_DISPATCH_INTERVAL_SECONDS == 0

    def test_negative_interval_rejected(self):
        from stock_tracker.config import Settings
        with pytest.raises(ValidationError):
            Settings(_env_file=None, MIN_DISPATCH_INTERVAL_SECONDS=-1)

    def test_quota_store_normalized(self):
        from stock_tracker.config import Settings
        settings = Settings(_env_file=None, QUOTA_STORE=" Redis ")
        assert settings.QUOTA_STORE == "redis"

    def test_unknown_quota_store_rejected(self):
        from stock_tracker.config import Settings
        with pytest.raises(ValidationError, match="QUOTA_STORE must be one of"):
            Settings(_env_file=None, QUOTA_STORE="sqlite")
