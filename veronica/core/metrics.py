"""Metrics calculator for backtest results.

Computes aggregate statistics from the snapshot sequence:
- Fund curve (liquidity + marked value of all positions per snapshot)
- Total return against the starting liquidity
- Sharpe ratio (per-snapshot returns)
- Maximum drawdown
- Number of closed trades

Usage:
    from veronica.core.metrics import compute_metrics

    result = compute_metrics(result)  # Mutates result in-place and returns it
"""

from __future__ import annotations

import math

from veronica.core.schemas import BacktestResult, FundPoint


def compute_metrics(result: BacktestResult) -> BacktestResult:
    """Compute all aggregate metrics on a BacktestResult.

    Populates: fund_series, final_fund, total_return_pct, max_drawdown_pct,
    sharpe_ratio, total_trades, total_snapshots.

    Args:
        result: BacktestResult with portfolios and trade_series populated.

    Returns:
        The same BacktestResult with metrics filled in.
    """
    initial = result.config.initial_liquidity

    result.fund_series = [FundPoint(date=p.date, fund=p.fund) for p in result.portfolios]
    result.final_fund = result.fund_series[-1].fund if result.fund_series else initial
    result.total_return_pct = _compute_return(result.final_fund, initial)
    result.max_drawdown_pct = _compute_max_drawdown(initial, result.fund_series)
    result.sharpe_ratio = _compute_sharpe(initial, result.fund_series)
    result.total_trades = sum(len(trades) for trades in result.trade_series.values())
    result.total_snapshots = len(result.portfolios)

    return result


def _compute_return(final_fund: int, initial_liquidity: int) -> float:
    """Total return as a percentage (e.g. 8.5 for 8.5%)."""
    if initial_liquidity <= 0:
        return 0.0
    return round((final_fund - initial_liquidity) / initial_liquidity * 100, 2)


def _compute_sharpe(initial_liquidity: int, fund_series: list[FundPoint]) -> float:
    """Annualized Sharpe ratio from per-snapshot fund returns.

    Snapshots are trading days, so the ratio is annualized with sqrt(252).
    Returns 0.0 with fewer than two returns or a flat fund curve.
    """
    funds = [initial_liquidity] + [point.fund for point in fund_series]
    returns = [
        (current - previous) / previous
        for previous, current in zip(funds, funds[1:])
        if previous > 0
    ]
    if len(returns) < 2:
        return 0.0

    mean_return = sum(returns) / len(returns)
    variance = sum((r - mean_return) ** 2 for r in returns) / len(returns)
    std_return = math.sqrt(variance)

    if std_return < 1e-12:
        return 0.0

    sharpe = (mean_return / std_return) * math.sqrt(252)
    return round(sharpe, 4)


def _compute_max_drawdown(initial_liquidity: int, fund_series: list[FundPoint]) -> float:
    """Largest peak-to-trough decline of the fund, as a percentage of the peak."""
    peak = initial_liquidity
    max_dd = 0.0

    for point in fund_series:
        if point.fund > peak:
            peak = point.fund
        if peak > 0:
            dd = (peak - point.fund) / peak * 100
            max_dd = max(max_dd, dd)

    return round(max_dd, 2)
