"""Score — the ranking signal a strategy produces for one symbol and day."""

from __future__ import annotations

from functools import total_ordering

from pydantic import BaseModel, ConfigDict, Field


@total_ordering
class Score(BaseModel):
    """Entry score. Ordered by `point`, then `trading_volume`; greater is better.

    A `point` of zero or below means "do not buy".
    """

    model_config = ConfigDict(frozen=True)

    point: int = 0
    trading_volume: int = Field(default=0, ge=0)

    @classmethod
    def neutral(cls) -> Score:
        return cls(point=0, trading_volume=0)

    @property
    def is_buy(self) -> bool:
        return self.point > 0

    def _key(self) -> tuple[int, int]:
        return (self.point, self.trading_volume)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Score):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Score):
            return NotImplemented
        return self._key() < other._key()

    def __hash__(self) -> int:
        return hash(self._key())
