"""Decision engine — one simulation step per assessment date.

For each date the engine runs four phases, in this order:

1. Trading-data check: every held symbol needs a record on the date,
   otherwise the whole date is skipped (weekends, holidays, suspensions).
2. Settle: positions the strategy wants closed are sold at the day's mid
   price and the proceeds are credited to liquidity.
3. Hold: remaining positions are marked at the day's mid price.
4. Select: the universe is ranked by score and the best candidates fill
   the free slots, splitting the liquidity available at the start of the
   phase evenly between them.

Usage:
    engine = DecisionEngine(store, strategy, symbols=["2330", "2317"])
    state = PortfolioState(initial_liquidity=200_000, capacity=5)
    portfolio = engine.calc_portfolio(state, date(2021, 6, 1))
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date

from veronica.common.config import MissingPricePolicy
from veronica.common.exceptions import DataInconsistencyError, StorageError
from veronica.common.logging import get_logger
from veronica.common.schemas import RawRecord
from veronica.core.exceptions import DecisionError
from veronica.core.schemas import Portfolio, StockInfo
from veronica.core.state import PortfolioState
from veronica.storage.backend import TimeSeriesStore
from veronica.strategy.exceptions import ScoringError
from veronica.strategy.schema import Score
from veronica.strategy.strategy import Strategy

logger = get_logger("DECISION")


class DecisionEngine:
    """Turns strategy signals into buy/hold/settle actions.

    Args:
        store: Source of daily records.
        strategy: Entry scoring and settle checks.
        symbols: The tradable universe, in a fixed order (ties keep it).
        missing_price_policy: What to do when a held symbol has no record
            during the hold phase: "zero_fill" marks it at 0, "fail" aborts.
    """

    def __init__(
        self,
        store: TimeSeriesStore,
        strategy: Strategy,
        symbols: Sequence[str],
        missing_price_policy: MissingPricePolicy = "zero_fill",
    ) -> None:
        self.store = store
        self.strategy = strategy
        self.symbols = list(symbols)
        self.missing_price_policy = missing_price_policy

    def calc_portfolio(self, state: PortfolioState, assess_date: date) -> Portfolio | None:
        """Run one simulation step.

        Args:
            state: Liquidity and open positions; mutated in place.
            assess_date: The day being evaluated.

        Returns:
            The snapshot for `assess_date`, or None when a held symbol has
            no trading data that day.

        Raises:
            DecisionError: On any store, consistency or scoring failure.
                `subsystem` tells which side failed.
        """
        try:
            if not self._has_trading_data(state, assess_date):
                return None

            stocks_settled = self._handle_settle_stocks(state, assess_date)
            stocks_hold = self._handle_hold_stocks(state, assess_date)
            stocks_selected = self._handle_selected_stocks(state, assess_date)
        except (StorageError, DataInconsistencyError) as exc:
            raise DecisionError(
                exc.args[0],
                subsystem="store",
                context={"date": str(assess_date), **exc.context},
            ) from exc
        except ScoringError as exc:
            raise DecisionError(
                exc.args[0],
                subsystem="strategy",
                context={"date": str(assess_date), **exc.context},
            ) from exc

        return Portfolio(
            date=assess_date,
            stocks_selected=stocks_selected,
            stocks_hold=stocks_hold,
            stocks_settled=stocks_settled,
            liquidity=state.liquidity,
        )

    # ─── Phases ───

    def _has_trading_data(self, state: PortfolioState, assess_date: date) -> bool:
        return all(self.store.query(symbol, assess_date) is not None for symbol in state.holdings)

    def _handle_settle_stocks(self, state: PortfolioState, assess_date: date) -> list[StockInfo]:
        to_settle = [
            symbol
            for symbol, holding in state.holdings.items()
            if self.strategy.settle_check(symbol, holding.entry_date, assess_date)
        ]

        settled: list[StockInfo] = []
        for symbol in to_settle:
            record = self._require_record(symbol, assess_date)
            holding = state.close_position(symbol)
            price = record.mid_price

            state.credit(holding.quantity * price)
            settled.append(StockInfo(symbol=symbol, quantity=holding.quantity, price=price))

        if settled:
            logger.info(
                "Stocks settled",
                extra={
                    "data": {
                        "date": str(assess_date),
                        "symbols": [s.symbol for s in settled],
                        "liquidity": state.liquidity,
                    }
                },
            )
        return settled

    def _handle_hold_stocks(self, state: PortfolioState, assess_date: date) -> list[StockInfo]:
        held: list[StockInfo] = []
        for symbol, holding in state.holdings.items():
            record = self.store.query(symbol, assess_date)
            if record is None:
                record = self._missing_mark_price(symbol, assess_date)
            held.append(StockInfo(symbol=symbol, quantity=holding.quantity, price=record.mid_price))
        return held

    def _handle_selected_stocks(self, state: PortfolioState, assess_date: date) -> list[StockInfo]:
        symbols = self._select_symbols(state, assess_date)
        if not symbols:
            return []

        invest_per_stock = state.liquidity // len(symbols)
        selected: list[StockInfo] = []

        for symbol in symbols:
            record = self._require_record(symbol, assess_date)
            price = record.mid_price
            if price <= 0:
                raise DataInconsistencyError(
                    "Non-positive trade price",
                    context={"symbol": symbol, "date": str(assess_date), "price": price},
                )

            quantity = invest_per_stock // price
            state.debit(quantity * price)
            state.open_position(symbol, assess_date, quantity)
            selected.append(StockInfo(symbol=symbol, quantity=quantity, price=price))

        logger.info(
            "Stocks selected",
            extra={
                "data": {
                    "date": str(assess_date),
                    "symbols": symbols,
                    "invest_per_stock": invest_per_stock,
                    "liquidity": state.liquidity,
                }
            },
        )
        return selected

    # ─── Helpers ───

    def _select_symbols(self, state: PortfolioState, assess_date: date) -> list[str]:
        """Best-scoring unheld symbols, up to the number of open slots."""
        slots = state.open_slots
        if slots == 0:
            return []

        ranked = self.rank(
            [symbol for symbol in self.symbols if symbol not in state.holdings], assess_date
        )

        chosen: list[str] = []
        for symbol, score in ranked:
            if len(chosen) == slots or not score.is_buy:
                break
            chosen.append(symbol)
        return chosen

    def rank(self, symbols: Sequence[str], assess_date: date) -> list[tuple[str, Score]]:
        """Score `symbols` and sort them best first. Equal scores keep input order."""
        scored = [(symbol, self.strategy.analyze(symbol, assess_date)) for symbol in symbols]
        return sorted(scored, key=lambda item: item[1], reverse=True)

    def _require_record(self, symbol: str, assess_date: date) -> RawRecord:
        record = self.store.query(symbol, assess_date)
        if record is None:
            raise DataInconsistencyError(
                "Expected record is missing",
                context={"symbol": symbol, "date": str(assess_date)},
            )
        return record

    def _missing_mark_price(self, symbol: str, assess_date: date) -> RawRecord:
        if self.missing_price_policy == "fail":
            raise DataInconsistencyError(
                "Held symbol has no record to mark",
                context={"symbol": symbol, "date": str(assess_date)},
            )
        logger.warning(
            "Held symbol has no record, marking at zero",
            extra={"data": {"symbol": symbol, "date": str(assess_date)}},
        )
        return RawRecord.zero(assess_date)
