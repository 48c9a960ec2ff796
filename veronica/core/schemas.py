"""Pydantic schemas for simulation state snapshots and backtest results.

All prices and money amounts are integers: trade prices are the truncated
mid price of the day, quantities are whole shares, and liquidity is kept in
the same unit as prices.
"""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, ConfigDict, Field, model_validator

# ─── Configuration ───


class BacktestConfig(BaseModel):
    """Configuration for a backtest run."""

    start_date: date
    end_date: date
    initial_liquidity: int = Field(default=200_000, ge=0)
    capacity: int = Field(default=5, ge=1)
    strategy: str = "bollinger_band"

    @model_validator(mode="after")
    def validate_date_range(self) -> BacktestConfig:
        """Ensure end_date >= start_date."""
        if self.end_date < self.start_date:
            msg = f"end_date ({self.end_date}) must be >= start_date ({self.start_date})"
            raise ValueError(msg)
        return self


# ─── Positions ───


class Holding(BaseModel):
    """An open position in one symbol."""

    model_config = ConfigDict(frozen=True)

    entry_date: date
    quantity: int = Field(ge=0)


class StockInfo(BaseModel):
    """One stock line of a snapshot: how many shares at which price."""

    model_config = ConfigDict(frozen=True)

    symbol: str
    quantity: int = Field(ge=0)
    price: int = Field(ge=0)

    @property
    def value(self) -> int:
        return self.quantity * self.price


# ─── Per-Day Snapshot ───


class Portfolio(BaseModel):
    """Simulation snapshot for one assessment date."""

    model_config = ConfigDict(frozen=True)

    date: date
    stocks_selected: list[StockInfo] = []
    stocks_hold: list[StockInfo] = []
    stocks_settled: list[StockInfo] = []
    liquidity: int = 0

    @property
    def fund(self) -> int:
        """Liquidity plus the marked value of every held or newly bought stock."""
        invested = sum(s.value for s in self.stocks_hold) + sum(
            s.value for s in self.stocks_selected
        )
        return self.liquidity + invested

    def __str__(self) -> str:
        symbols = [s.symbol for s in self.stocks_selected] + [s.symbol for s in self.stocks_hold]
        return "Stocks: " + ", ".join(symbols)


# ─── Trades ───


class TradeInterval(BaseModel):
    """A closed position: bought on hold_date, settled on settle_date."""

    model_config = ConfigDict(frozen=True)

    hold_date: date
    settle_date: date


class FundPoint(BaseModel):
    """Total fund under management at one snapshot."""

    date: date
    fund: int


# ─── Full Backtest Result ───


class BacktestResult(BaseModel):
    """Complete result of a backtest run."""

    config: BacktestConfig
    portfolios: list[Portfolio] = []
    trade_series: dict[str, list[TradeInterval]] = {}
    fund_series: list[FundPoint] = []
    final_fund: int = 0
    total_return_pct: float = 0.0
    max_drawdown_pct: float = 0.0
    sharpe_ratio: float = 0.0
    total_trades: int = 0
    total_snapshots: int = 0
    total_days_simulated: int = 0
    duration_seconds: float = 0.0
