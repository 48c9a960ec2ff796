"""Simulation state threaded through the decision engine.

Holds the liquidity and open positions of one backtest run. The engine never
keeps state of its own: every `calc_portfolio` call receives the state
object, which keeps runs independent and lets tests drive a single day.

Liquidity only changes through `debit()` (buying) and `credit()` (settling).

Usage:
    state = PortfolioState(initial_liquidity=200_000, capacity=5)
    state.debit(1_000)
    state.open_position("2330", date(2021, 6, 1), quantity=2)
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from types import MappingProxyType

from veronica.common.exceptions import DataInconsistencyError
from veronica.core.schemas import Holding


class PortfolioState:
    """Liquidity and open positions of a running simulation.

    Attributes:
        capacity: Maximum number of simultaneously held positions.
    """

    def __init__(self, initial_liquidity: int = 200_000, capacity: int = 5) -> None:
        if initial_liquidity < 0:
            msg = f"initial_liquidity must be >= 0, got {initial_liquidity}"
            raise ValueError(msg)
        if capacity < 1:
            msg = f"capacity must be >= 1, got {capacity}"
            raise ValueError(msg)

        self.capacity = capacity
        self._liquidity = initial_liquidity
        self._holdings: dict[str, Holding] = {}

    @property
    def liquidity(self) -> int:
        """Uninvested money."""
        return self._liquidity

    @property
    def holdings(self) -> Mapping[str, Holding]:
        """Read-only view of open positions, in entry order."""
        return MappingProxyType(self._holdings)

    @property
    def open_slots(self) -> int:
        """How many more positions fit under the capacity."""
        return max(0, self.capacity - len(self._holdings))

    def credit(self, amount: int) -> None:
        """Add settle proceeds to liquidity."""
        if amount < 0:
            msg = f"credit amount must be >= 0, got {amount}"
            raise ValueError(msg)
        self._liquidity += amount

    def debit(self, amount: int) -> None:
        """Remove a buy cost from liquidity."""
        if amount < 0:
            msg = f"debit amount must be >= 0, got {amount}"
            raise ValueError(msg)
        if amount > self._liquidity:
            msg = f"debit of {amount} exceeds liquidity {self._liquidity}"
            raise ValueError(msg)
        self._liquidity -= amount

    def open_position(self, symbol: str, entry_date: date, quantity: int) -> Holding:
        """Record a new position.

        Raises:
            DataInconsistencyError: If `symbol` is already held.
        """
        if symbol in self._holdings:
            raise DataInconsistencyError(
                "Symbol is already held",
                context={"symbol": symbol, "entry_date": str(self._holdings[symbol].entry_date)},
            )
        holding = Holding(entry_date=entry_date, quantity=quantity)
        self._holdings[symbol] = holding
        return holding

    def close_position(self, symbol: str) -> Holding:
        """Remove and return a position.

        Raises:
            DataInconsistencyError: If `symbol` is not held.
        """
        holding = self._holdings.pop(symbol, None)
        if holding is None:
            raise DataInconsistencyError("Symbol is not held", context={"symbol": symbol})
        return holding
