"""Bollinger band strategy.

Entry: a symbol scores when its representative price has been riding the
upper band (between SMA + SD and SMA + K * SD) while the SMA rises and the
band does not narrow toward the assessment date.

Exit: a position settles when the SMA has fallen below its level at the
entry date, or when the weighted price (low + 3/4 of the day's range) has
stayed under SMA + SD for `settle_streak` consecutive days.

Usage:
    from veronica.strategy.bollinger_band import BollingerBandStrategy

    strategy = BollingerBandStrategy(store)
    score = strategy.analyze("2330", date(2021, 6, 1))
"""

from __future__ import annotations

from datetime import date, timedelta

from veronica.common.config import InsufficientHistoryPolicy, Settings
from veronica.common.exceptions import StorageError
from veronica.common.logging import get_logger
from veronica.dataview.view import IndicatorView, bollinger_views
from veronica.storage.backend import TimeSeriesStore
from veronica.strategy.exceptions import InsufficientHistoryError, ScoringError
from veronica.strategy.schema import Score

logger = get_logger("STRATEGY")

PERIOD = 20
ANALYZE_RANGE = 10
BAND_SIZE = 2
SETTLE_STREAK = 3
WEIGHTED_PRICE_FACTOR = 0.75


class BollingerBandStrategy:
    """Scores and settle checks based on Bollinger bands.

    Args:
        store: Source of daily records.
        period: Indicator window length P.
        analyze_range: Number of trailing views A an entry score looks at.
        band_size: Upper band multiplier K.
        settle_streak: Consecutive weak days that trigger a settle.
        insufficient_history_policy: "neutral" to treat short histories as
            a neutral score / no settle, "raise" to surface them as ScoringError.
    """

    name = "bollinger_band"

    def __init__(
        self,
        store: TimeSeriesStore,
        period: int = PERIOD,
        analyze_range: int = ANALYZE_RANGE,
        band_size: int = BAND_SIZE,
        settle_streak: int = SETTLE_STREAK,
        insufficient_history_policy: InsufficientHistoryPolicy = "neutral",
    ) -> None:
        self.store = store
        self.period = period
        self.analyze_range = analyze_range
        self.band_size = band_size
        self.settle_streak = settle_streak
        self.insufficient_history_policy = insufficient_history_policy

    @classmethod
    def from_settings(cls, store: TimeSeriesStore, settings: Settings) -> BollingerBandStrategy:
        return cls(
            store,
            period=settings.indicator_period,
            analyze_range=settings.analyze_range,
            band_size=settings.band_size,
            settle_streak=settings.settle_streak,
            insufficient_history_policy=settings.insufficient_history_policy,
        )

    # ─── Public API ───

    def analyze(self, symbol: str, assess_date: date) -> Score:
        """Compute the entry score of `symbol` at `assess_date`.

        Raises:
            ScoringError: On store failures, or on short histories when the
                policy is "raise".
        """
        try:
            return self._analyze(symbol, assess_date)
        except InsufficientHistoryError as exc:
            self._recover(exc)
            return Score.neutral()

    def settle_check(self, symbol: str, hold_date: date, assess_date: date) -> bool:
        """Decide whether a position opened at `hold_date` should settle.

        Raises:
            ScoringError: On store failures, or on short histories when the
                policy is "raise".
        """
        try:
            return self._settle_check(symbol, hold_date, assess_date)
        except InsufficientHistoryError as exc:
            self._recover(exc)
            return False

    # ─── Internals ───

    def _analyze(self, symbol: str, assess_date: date) -> Score:
        window_start = assess_date - timedelta(days=2 * self.analyze_range)
        views = self._get_views(symbol, window_start, assess_date)

        if len(views) < self.analyze_range:
            raise InsufficientHistoryError(
                "Not enough views to score",
                context={"symbol": symbol, "date": str(assess_date), "views": len(views)},
            )
        if views[-1].date != assess_date:
            return Score.neutral()

        window = views[-self.analyze_range :]

        # SD must be non-increasing walking back from assess_date
        for earlier, later in zip(window, window[1:]):
            if earlier.sd > later.sd:
                return Score.neutral()

        in_zone = sum(
            1
            for v in window
            if v.sma + v.sd <= v.representative_price <= v.sma + self.band_size * v.sd
        )
        in_buy_zone_ratio = in_zone / len(window)

        first_sma = window[0].sma
        if first_sma <= 0:
            return Score.neutral()
        rise_ratio = (window[-1].sma - first_sma) / first_sma * 100

        if rise_ratio <= 0:
            return Score.neutral()

        score = Score(
            point=round(in_buy_zone_ratio * rise_ratio),
            trading_volume=window[-1].volume,
        )
        logger.debug(
            "Score computed",
            extra={
                "data": {
                    "symbol": symbol,
                    "date": str(assess_date),
                    "in_buy_zone_ratio": round(in_buy_zone_ratio, 4),
                    "rise_ratio": round(rise_ratio, 4),
                    "point": score.point,
                }
            },
        )
        return score

    def _settle_check(self, symbol: str, hold_date: date, assess_date: date) -> bool:
        views = self._get_views(symbol, hold_date, assess_date)

        if not views:
            raise InsufficientHistoryError(
                "No views between hold date and assess date",
                context={"symbol": symbol, "hold_date": str(hold_date), "date": str(assess_date)},
            )
        assess_view = views[-1]
        if assess_view.date != assess_date:
            return False

        # Trend reversal since entry
        if views[0].sma > assess_view.sma:
            return True

        streak = 0
        for view in reversed(views):
            weighted_price = view.low + WEIGHTED_PRICE_FACTOR * (view.high - view.low)
            if weighted_price >= view.sma + view.sd:
                break
            streak += 1
            if streak >= self.settle_streak:
                return True

        return False

    def _get_views(self, symbol: str, start: date, end: date) -> list[IndicatorView]:
        """Views dated within [start, end], warmed up on earlier records."""
        fetch_start = start - timedelta(days=2 * self.period)
        try:
            records = self.store.query_by_range(symbol, fetch_start, end)
        except StorageError as exc:
            raise ScoringError(
                "Failed to load records for scoring",
                context={"symbol": symbol, "start": str(fetch_start), "end": str(end)},
            ) from exc

        return [view for view in bollinger_views(records, self.period) if view.date >= start]

    def _recover(self, exc: InsufficientHistoryError) -> None:
        if self.insufficient_history_policy == "raise":
            raise ScoringError(exc.args[0], context=exc.context) from exc
        logger.debug("Insufficient history, neutral result", extra={"data": exc.context})
