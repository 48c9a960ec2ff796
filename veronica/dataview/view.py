"""Indicator views — rolling SMA and standard deviation over daily records.

The representative price of a day is (high + low + close) / 3. For a window
of length P, the first P-1 records of any input produce no view; from then on
every record yields exactly one `IndicatorView`.

Statistics are updated in O(1) per record (sliding-window Welford updates),
so a long record sequence is never recomputed window by window.

Usage:
    from veronica.dataview.view import bollinger_views

    for view in bollinger_views(records, period=20):
        print(view.date, view.sma, view.sd)
"""

from __future__ import annotations

import math
from collections import deque
from collections.abc import Iterable, Iterator
from datetime import date

from pydantic import BaseModel, ConfigDict

from veronica.common.exceptions import ConfigurationError
from veronica.common.schemas import RawRecord

DEFAULT_PERIOD = 20


class IndicatorView(BaseModel):
    """A daily bar enriched with the trailing-window SMA and SD."""

    model_config = ConfigDict(frozen=True)

    open: float
    high: float
    low: float
    close: float
    date: date
    volume: int
    sma: float
    sd: float

    @property
    def representative_price(self) -> float:
        return representative_price(self.high, self.low, self.close)


def representative_price(high: float, low: float, close: float) -> float:
    """Typical price of a day: (high + low + close) / 3."""
    return (high + low + close) / 3.0


class RollingStats:
    """Sliding-window mean and population standard deviation.

    Args:
        period: Window length. Must be >= 1.
    """

    def __init__(self, period: int) -> None:
        if period < 1:
            raise ConfigurationError("Indicator period must be >= 1", context={"period": period})
        self.period = period
        self._window: deque[float] = deque()
        self._mean = 0.0
        self._m2 = 0.0  # sum of squared deviations from the mean

    @property
    def ready(self) -> bool:
        """True once the window holds `period` values."""
        return len(self._window) == self.period

    @property
    def mean(self) -> float:
        return self._mean

    @property
    def sd(self) -> float:
        if not self._window:
            return 0.0
        return math.sqrt(max(self._m2, 0.0) / len(self._window))

    def push(self, value: float) -> None:
        """Add a value, evicting the oldest one once the window is full."""
        if len(self._window) < self.period:
            self._window.append(value)
            delta = value - self._mean
            self._mean += delta / len(self._window)
            self._m2 += delta * (value - self._mean)
            return

        old = self._window.popleft()
        self._window.append(value)
        new_mean = self._mean + (value - old) / self.period
        self._m2 += (value - old) * (value - new_mean + old - self._mean)
        self._mean = new_mean


def bollinger_views(
    records: Iterable[RawRecord],
    period: int = DEFAULT_PERIOD,
) -> Iterator[IndicatorView]:
    """Lazily transform ascending daily records into indicator views.

    Args:
        records: Records of one symbol in strictly ascending date order.
        period: Rolling window length P.

    Yields:
        One IndicatorView per record, starting with the P-th record.

    Raises:
        ConfigurationError: If period < 1.
        ValueError: If the records are not strictly ascending by date.
    """
    stats = RollingStats(period)
    previous: date | None = None

    for record in records:
        if previous is not None and record.date <= previous:
            msg = f"Records must be strictly ascending by date ({record.date} after {previous})"
            raise ValueError(msg)
        previous = record.date

        stats.push(representative_price(record.high, record.low, record.close))
        if not stats.ready:
            continue

        yield IndicatorView(
            open=record.open,
            high=record.high,
            low=record.low,
            close=record.close,
            date=record.date,
            volume=record.trading_volume,
            sma=stats.mean,
            sd=stats.sd,
        )
