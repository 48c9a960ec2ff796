"""Tests for the strategy registry."""

from __future__ import annotations

import pytest

from veronica.common.config import Settings
from veronica.common.exceptions import ConfigurationError
from veronica.strategy.bollinger_band import BollingerBandStrategy
from veronica.strategy.strategy import STRATEGIES, create_strategy


class TestCreateStrategy:
    def test_bollinger_band_registered(self):
        assert "bollinger_band" in STRATEGIES

    def test_builds_from_settings(self, store):
        settings = Settings(analyze_range=5, settle_streak=2, insufficient_history_policy="raise")
        strategy = create_strategy("bollinger_band", store, settings)

        assert isinstance(strategy, BollingerBandStrategy)
        assert strategy.analyze_range == 5
        assert strategy.settle_streak == 2
        assert strategy.insufficient_history_policy == "raise"
        assert strategy.store is store

    def test_unknown_name(self, store, test_settings):
        with pytest.raises(ConfigurationError, match="Unknown strategy"):
            create_strategy("macd", store, test_settings)
