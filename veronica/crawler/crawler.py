"""Crawler contract — where daily records and the stock universe come from."""

from __future__ import annotations

from datetime import date
from typing import Protocol

from veronica.common.schemas import RawRecord


class Crawler(Protocol):
    """A source of daily records.

    Implementations raise `RateLimitedError`, `BadRequestError` or
    `TransientIOError` (all `CrawlerError`) on failure.
    """

    def get_symbol_list(self) -> list[str]: ...

    def get_daily_records(self, symbol: str, start: date, end: date) -> list[RawRecord]: ...
