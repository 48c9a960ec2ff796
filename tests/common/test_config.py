"""Tests for application configuration."""

from __future__ import annotations

import pytest

from veronica.common.config import Settings, get_settings
from veronica.common.exceptions import ConfigurationError


class TestSettings:
    """Test Settings loading from environment variables."""

    def test_settings_loads(self):
        """Settings can be instantiated from environment."""
        assert get_settings() is not None

    def test_environment_is_testing(self):
        """conftest.py sets ENVIRONMENT=testing."""
        assert get_settings().environment == "testing"

    def test_database_url_from_env(self):
        """DATABASE_URL points the tests at in-memory SQLite."""
        assert get_settings().database_url == "sqlite://"

    def test_simulation_defaults(self):
        settings = get_settings()
        assert settings.initial_liquidity == 200_000
        assert settings.capacity == 5
        assert settings.strategy == "bollinger_band"
        assert settings.missing_price_policy == "zero_fill"

    def test_bollinger_defaults(self):
        settings = get_settings()
        assert settings.indicator_period == 20
        assert settings.analyze_range == 10
        assert settings.band_size == 2
        assert settings.settle_streak == 3
        assert settings.insufficient_history_policy == "neutral"

    def test_crawler_defaults(self):
        """FinMind quota resets hourly, so the backoff defaults to an hour."""
        settings = get_settings()
        assert settings.rate_limit_backoff_seconds == 3600.0
        assert settings.finmind_rate_limit_per_second == 1.0

    def test_settings_singleton(self):
        """get_settings returns the same cached instance."""
        assert get_settings() is get_settings()


class TestSettingsValidation:
    """Invalid values surface as ConfigurationError."""

    @pytest.fixture(autouse=True)
    def _reset_cache(self):
        get_settings.cache_clear()
        yield
        get_settings.cache_clear()

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("CAPACITY", "3")
        assert get_settings().capacity == 3

    def test_zero_capacity_rejected(self, monkeypatch):
        monkeypatch.setenv("CAPACITY", "0")
        with pytest.raises(ConfigurationError, match="Invalid settings"):
            get_settings()

    def test_unknown_policy_rejected(self, monkeypatch):
        monkeypatch.setenv("MISSING_PRICE_POLICY", "guess")
        with pytest.raises(ConfigurationError):
            get_settings()

    def test_analyze_range_needs_two_views(self):
        with pytest.raises(ValueError):
            Settings(analyze_range=1)
