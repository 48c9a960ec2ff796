"""Strategy contract and registry.

The set of strategies is closed: `StrategyName` lists every variant and
`STRATEGIES` maps each name to its constructor. Adding a strategy means
adding a name and a registry entry; callers only rely on the `Strategy`
protocol (`analyze` + `settle_check`).

Usage:
    from veronica.strategy.strategy import create_strategy

    strategy = create_strategy("bollinger_band", store, get_settings())
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import date
from typing import Literal, Protocol, get_args

from veronica.common.config import Settings
from veronica.common.exceptions import ConfigurationError
from veronica.storage.backend import TimeSeriesStore
from veronica.strategy.bollinger_band import BollingerBandStrategy
from veronica.strategy.schema import Score

StrategyName = Literal["bollinger_band"]


class Strategy(Protocol):
    """Capabilities the decision engine needs from a strategy."""

    def analyze(self, symbol: str, assess_date: date) -> Score: ...

    def settle_check(self, symbol: str, hold_date: date, assess_date: date) -> bool: ...


StrategyFactory = Callable[[TimeSeriesStore, Settings], Strategy]

STRATEGIES: dict[str, StrategyFactory] = {
    "bollinger_band": BollingerBandStrategy.from_settings,
}


def create_strategy(name: str, store: TimeSeriesStore, settings: Settings) -> Strategy:
    """Build the strategy registered under `name`.

    Raises:
        ConfigurationError: If `name` is not a known strategy.
    """
    factory = STRATEGIES.get(name)
    if factory is None:
        raise ConfigurationError(
            f"Unknown strategy: {name}",
            context={"available": sorted(get_args(StrategyName))},
        )
    return factory(store, settings)
