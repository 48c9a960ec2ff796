"""Tests for rolling indicator views."""

from __future__ import annotations

import statistics
from datetime import date, timedelta
from types import GeneratorType

import pytest

from tests.factories import make_record, make_series
from veronica.common.exceptions import ConfigurationError
from veronica.dataview.view import RollingStats, bollinger_views, representative_price

START = date(2021, 1, 1)

# Irregular prices so every window has a different mean and SD
PRICES = [101.0, 99.5, 104.2, 98.1, 97.0, 110.3, 108.8, 95.4, 100.0, 102.7, 93.3, 120.1]


class TestRepresentativePrice:
    def test_average_of_high_low_close(self):
        assert representative_price(12.0, 6.0, 9.0) == pytest.approx(9.0)

    def test_view_property(self):
        records = [
            make_record(START + timedelta(days=i), high=12, low=6, close=9) for i in range(2)
        ]
        view = next(bollinger_views(records, period=2))
        assert view.representative_price == pytest.approx(9.0)


class TestRollingStats:
    """Test the sliding mean / population SD."""

    def test_invalid_period(self):
        with pytest.raises(ConfigurationError):
            RollingStats(0)

    def test_ready_after_period_values(self):
        stats = RollingStats(3)
        stats.push(1.0)
        stats.push(2.0)
        assert not stats.ready
        stats.push(3.0)
        assert stats.ready

    def test_matches_naive_computation(self):
        period = 5
        stats = RollingStats(period)
        for i, price in enumerate(PRICES):
            stats.push(price)
            window = PRICES[max(0, i - period + 1) : i + 1]
            assert stats.mean == pytest.approx(statistics.fmean(window))
            assert stats.sd == pytest.approx(statistics.pstdev(window), abs=1e-9)


class TestBollingerViews:
    """Test the view stream produced from daily records."""

    def test_is_lazy(self):
        assert isinstance(bollinger_views([], period=20), GeneratorType)

    def test_fewer_records_than_period_yield_nothing(self):
        records = make_series(START, [100.0] * 19)
        assert list(bollinger_views(records, period=20)) == []

    def test_one_view_per_record_from_period_on(self):
        assert len(list(bollinger_views(make_series(START, [100.0] * 20), period=20))) == 1
        assert len(list(bollinger_views(make_series(START, [100.0] * 25), period=20))) == 6

    def test_first_view_is_dated_at_period_th_record(self):
        views = list(bollinger_views(make_series(START, PRICES), period=5))
        assert views[0].date == START + timedelta(days=4)
        assert views[-1].date == START + timedelta(days=len(PRICES) - 1)

    def test_constant_prices_have_zero_sd(self):
        views = list(bollinger_views(make_series(START, [50.0] * 30), period=20))
        assert all(v.sd == 0.0 for v in views)
        assert all(v.sma == 50.0 for v in views)

    def test_streaming_matches_per_window(self):
        period = 4
        views = list(bollinger_views(make_series(START, PRICES), period=period))
        for offset, view in enumerate(views):
            window = PRICES[offset : offset + period]
            assert view.sma == pytest.approx(statistics.fmean(window))
            assert view.sd == pytest.approx(statistics.pstdev(window), abs=1e-9)

    def test_view_carries_bar_fields(self):
        records = make_series(START, [10.0, 20.0], volume=777)
        view = next(bollinger_views(records, period=2))
        assert view.close == 20.0
        assert view.volume == 777
        assert view.date == START + timedelta(days=1)

    def test_descending_dates_rejected(self):
        records = list(reversed(make_series(START, PRICES)))
        with pytest.raises(ValueError, match="strictly ascending"):
            list(bollinger_views(records, period=3))

    def test_duplicate_dates_rejected(self):
        records = [make_record(START), make_record(START)]
        with pytest.raises(ValueError):
            list(bollinger_views(records, period=1))

    def test_invalid_period_rejected(self):
        with pytest.raises(ConfigurationError):
            list(bollinger_views(make_series(START, PRICES), period=0))
