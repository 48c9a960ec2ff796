"""Pydantic schemas shared by every package.

RULES:
- Records flow between the crawler, the store, the indicator engine and the
  decision engine as `RawRecord`; never as ad-hoc dicts.
- A record is keyed by (symbol, date). The symbol lives next to the record
  (e.g. `(symbol, record)` tuples), not inside it.
"""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, ConfigDict, Field


class RawRecord(BaseModel):
    """One daily OHLCV bar for one symbol. Immutable once ingested."""

    model_config = ConfigDict(frozen=True)

    open: float
    high: float
    low: float
    close: float
    spread: float = 0.0  # close-to-close change reported by the exchange
    date: date
    trading_volume: int = Field(default=0, ge=0)
    trading_money: int = Field(default=0, ge=0)

    @property
    def mid_price(self) -> int:
        """Trade price used by the simulation: (high + low) / 2, truncated."""
        return int((self.high + self.low) / 2)

    @classmethod
    def zero(cls, day: date) -> RawRecord:
        """A zero-valued record, used when a mark price must be zero-filled."""
        return cls(open=0.0, high=0.0, low=0.0, close=0.0, date=day)
