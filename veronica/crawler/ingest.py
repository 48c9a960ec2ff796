"""Raw-data update job — crawl daily records into the time-series store.

Runs outside the simulation. When the provider reports that the request
quota is used up, the job sleeps `backoff_seconds` and retries the same
symbol, at most `max_retries` times per symbol. Every other crawler error
aborts the update.

Usage:
    from veronica.crawler.ingest import update_raw_data

    update_raw_data(crawler, store, date(2021, 1, 1), date(2021, 12, 31))
"""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from datetime import date

from veronica.common.logging import get_logger
from veronica.common.schemas import RawRecord
from veronica.crawler.crawler import Crawler
from veronica.crawler.exceptions import RateLimitedError
from veronica.storage.backend import TimeSeriesStore

logger = get_logger("INGEST")


def fetch_with_backoff(
    crawler: Crawler,
    symbol: str,
    start: date,
    end: date,
    backoff_seconds: float = 3600.0,
    max_retries: int = 24,
    sleep: Callable[[float], None] = time.sleep,
) -> list[RawRecord]:
    """Fetch one symbol, waiting out rate limits.

    Raises:
        RateLimitedError: If the quota is still exhausted after `max_retries`.
        CrawlerError: On any other crawler failure (not retried).
    """
    retries = 0
    while True:
        try:
            return crawler.get_daily_records(symbol, start, end)
        except RateLimitedError:
            if retries >= max_retries:
                logger.error(
                    "Rate limit persists, giving up",
                    extra={"data": {"symbol": symbol, "attempts": retries + 1}},
                )
                raise
            retries += 1
            logger.warning(
                "Rate limit reached, sleeping before retry",
                extra={
                    "data": {
                        "symbol": symbol,
                        "retry": retries,
                        "wait_seconds": backoff_seconds,
                    }
                },
            )
            sleep(backoff_seconds)


def update_raw_data(
    crawler: Crawler,
    store: TimeSeriesStore,
    start: date,
    end: date,
    symbols: Sequence[str] | None = None,
    backoff_seconds: float = 3600.0,
    max_retries: int = 24,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """Crawl `symbols` (default: the crawler's full list) into `store`.

    Records of each symbol are written in one batch as soon as they are
    fetched, so an aborted update keeps the symbols already stored.

    Returns:
        Total number of records written.
    """
    if symbols is None:
        symbols = crawler.get_symbol_list()

    total = 0
    for symbol in symbols:
        logger.info("Fetching daily records", extra={"data": {"symbol": symbol}})
        records = fetch_with_backoff(
            crawler,
            symbol,
            start,
            end,
            backoff_seconds=backoff_seconds,
            max_retries=max_retries,
            sleep=sleep,
        )
        store.batch_insert((symbol, record) for record in records)
        total += len(records)

    logger.info(
        "Raw data updated",
        extra={
            "data": {
                "symbols": len(symbols),
                "records": total,
                "start": str(start),
                "end": str(end),
            }
        },
    )
    return total
