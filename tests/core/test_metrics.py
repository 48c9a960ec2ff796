"""Tests for backtest metrics."""

from __future__ import annotations

from datetime import date, timedelta

from veronica.core.metrics import compute_metrics
from veronica.core.schemas import BacktestConfig, BacktestResult, Portfolio, TradeInterval

START = date(2021, 6, 1)


def _result(liquidities: list[int], initial: int = 100) -> BacktestResult:
    config = BacktestConfig(start_date=START, end_date=START, initial_liquidity=initial)
    portfolios = [
        Portfolio(date=START + timedelta(days=i), liquidity=liquidity)
        for i, liquidity in enumerate(liquidities)
    ]
    return BacktestResult(config=config, portfolios=portfolios)


class TestComputeMetrics:
    def test_no_snapshots(self):
        result = compute_metrics(_result([]))
        assert result.final_fund == 100
        assert result.total_return_pct == 0.0
        assert result.max_drawdown_pct == 0.0
        assert result.sharpe_ratio == 0.0
        assert result.total_snapshots == 0

    def test_fund_series_and_return(self):
        result = compute_metrics(_result([100, 110, 121]))
        assert [p.fund for p in result.fund_series] == [100, 110, 121]
        assert result.final_fund == 121
        assert result.total_return_pct == 21.0

    def test_max_drawdown(self):
        result = compute_metrics(_result([120, 90, 150, 135]))
        # Peak 120 -> trough 90
        assert result.max_drawdown_pct == 25.0

    def test_flat_curve_has_zero_sharpe(self):
        assert compute_metrics(_result([100, 100, 100])).sharpe_ratio == 0.0

    def test_rising_curve_has_positive_sharpe(self):
        assert compute_metrics(_result([101, 103, 104, 107])).sharpe_ratio > 0

    def test_trade_count(self):
        result = _result([100])
        interval = TradeInterval(hold_date=START, settle_date=START)
        result.trade_series = {"A": [interval, interval], "B": [interval]}
        assert compute_metrics(result).total_trades == 3
