"""Backtesting runner — synchronous day-by-day simulation.

Drives the decision engine once per calendar day from start_date to
end_date inclusive. Days without trading data for the held symbols produce
no snapshot, so the runner never needs a trading calendar.

Besides the snapshots, the runner derives per-symbol trade intervals
(hold_date, settle_date) by matching each settle event with the date the
symbol was last selected.

Usage:
    from veronica.core.backtesting import run_backtest

    result = run_backtest(config, store, strategy, symbols)
"""

from __future__ import annotations

import time
from collections.abc import Sequence
from datetime import date, timedelta

from veronica.common.config import MissingPricePolicy
from veronica.common.exceptions import DataInconsistencyError
from veronica.common.logging import get_logger
from veronica.core.decision import DecisionEngine
from veronica.core.metrics import compute_metrics
from veronica.core.schemas import BacktestConfig, BacktestResult, Portfolio, TradeInterval
from veronica.core.state import PortfolioState
from veronica.storage.backend import TimeSeriesStore
from veronica.strategy.strategy import Strategy

logger = get_logger("BACKTEST")


def run_backtest(
    config: BacktestConfig,
    store: TimeSeriesStore,
    strategy: Strategy,
    symbols: Sequence[str],
    missing_price_policy: MissingPricePolicy = "zero_fill",
) -> BacktestResult:
    """Run a full backtest simulation.

    Args:
        config: Date range, starting liquidity and capacity.
        store: Source of daily records.
        strategy: Strategy used for scoring and settle checks.
        symbols: The tradable universe.
        missing_price_policy: Passed to the DecisionEngine.

    Returns:
        BacktestResult with snapshots, trade intervals and metrics.

    Raises:
        DecisionError: If a simulation step fails; the run is aborted.
        DataInconsistencyError: If a settle event has no matching selection.
    """
    start_time = time.monotonic()

    engine = DecisionEngine(store, strategy, symbols, missing_price_policy=missing_price_policy)
    state = PortfolioState(initial_liquidity=config.initial_liquidity, capacity=config.capacity)

    logger.info(
        "Backtest started",
        extra={
            "data": {
                "start_date": str(config.start_date),
                "end_date": str(config.end_date),
                "symbols": len(engine.symbols),
                "initial_liquidity": config.initial_liquidity,
                "capacity": config.capacity,
            }
        },
    )

    portfolios: list[Portfolio] = []
    open_entries: dict[str, date] = {}
    trade_series: dict[str, list[TradeInterval]] = {}
    days = 0
    current_date = config.start_date

    while current_date <= config.end_date:
        portfolio = engine.calc_portfolio(state, current_date)
        if portfolio is not None:
            _record_trades(portfolio, open_entries, trade_series)
            portfolios.append(portfolio)
        days += 1
        current_date += timedelta(days=1)

    duration = time.monotonic() - start_time

    result = BacktestResult(
        config=config,
        portfolios=portfolios,
        trade_series=trade_series,
        total_days_simulated=days,
        duration_seconds=round(duration, 4),
    )
    result = compute_metrics(result)

    logger.info(
        "Backtest finished",
        extra={
            "data": {
                "snapshots": result.total_snapshots,
                "trades": result.total_trades,
                "final_fund": result.final_fund,
                "total_return_pct": result.total_return_pct,
                "open_positions": sorted(open_entries),
            }
        },
    )
    return result


def _record_trades(
    portfolio: Portfolio,
    open_entries: dict[str, date],
    trade_series: dict[str, list[TradeInterval]],
) -> None:
    """Close intervals for settled stocks, then open entries for selected ones.

    Settles are matched before selections: a symbol settled and re-selected
    on the same day closes its old interval and starts a new one.

    Raises:
        DataInconsistencyError: If a settled symbol has no open entry.
    """
    for stock in portfolio.stocks_settled:
        hold_date = open_entries.pop(stock.symbol, None)
        if hold_date is None:
            raise DataInconsistencyError(
                "Settled symbol was never selected",
                context={"symbol": stock.symbol, "date": str(portfolio.date)},
            )
        trade_series.setdefault(stock.symbol, []).append(
            TradeInterval(hold_date=hold_date, settle_date=portfolio.date)
        )

    for stock in portfolio.stocks_selected:
        open_entries[stock.symbol] = portfolio.date
