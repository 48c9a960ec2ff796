"""Test data factories for daily records.

Usage:
    from tests.factories import make_record, make_series

    record = make_record(date(2021, 6, 1), high=16, low=8)
    records = make_series(date(2021, 1, 1), geometric_prices(60))
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date, timedelta

from veronica.common.schemas import RawRecord


def make_record(
    day: date,
    high: float = 10.0,
    low: float = 10.0,
    close: float | None = None,
    volume: int = 1_000,
    **overrides,
) -> RawRecord:
    """Create a RawRecord. Open and close default to the mid of high/low."""
    mid = (high + low) / 2
    fields = {
        "open": mid,
        "high": high,
        "low": low,
        "close": mid if close is None else close,
        "date": day,
        "trading_volume": volume,
        "trading_money": int(mid * volume),
    }
    fields.update(overrides)
    return RawRecord(**fields)


def make_series(
    start: date,
    prices: Sequence[float],
    volume: int = 1_000,
) -> list[RawRecord]:
    """One record per calendar day from `start`, with high = low = close = price."""
    return [
        make_record(start + timedelta(days=i), high=price, low=price, close=price, volume=volume)
        for i, price in enumerate(prices)
    ]


def geometric_prices(count: int, base: float = 100.0, rate: float = 0.03) -> list[float]:
    """Prices compounding by `rate` per day (negative rate for a decline)."""
    return [base * (1 + rate) ** i for i in range(count)]
