"""Decision-engine fixtures: a scripted strategy over a real store."""

from __future__ import annotations

from datetime import date
from unittest.mock import MagicMock

import pytest

from veronica.strategy.bollinger_band import BollingerBandStrategy
from veronica.strategy.schema import Score


class ScriptedSignals:
    """Scores and settle decisions keyed by (symbol, date).

    Anything not scripted is a neutral score / no settle.
    """

    def __init__(self) -> None:
        self.scores: dict[tuple[str, date], Score] = {}
        self.settles: set[tuple[str, date]] = set()

    def score(self, symbol: str, day: date, point: int, volume: int = 0) -> None:
        self.scores[(symbol, day)] = Score(point=point, trading_volume=volume)

    def settle(self, symbol: str, day: date) -> None:
        self.settles.add((symbol, day))

    def analyze(self, symbol: str, assess_date: date) -> Score:
        return self.scores.get((symbol, assess_date), Score.neutral())

    def settle_check(self, symbol: str, hold_date: date, assess_date: date) -> bool:
        return (symbol, assess_date) in self.settles


@pytest.fixture
def signals() -> ScriptedSignals:
    return ScriptedSignals()


@pytest.fixture
def strategy(signals):
    """A strategy mock whose answers come from `signals`."""
    mock = MagicMock(spec=BollingerBandStrategy)
    mock.analyze.side_effect = signals.analyze
    mock.settle_check.side_effect = signals.settle_check
    return mock
