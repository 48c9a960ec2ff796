"""FinMind API client for Taiwan stock daily prices.

Fetches daily OHLCV bars from the FinMind v4 data API
(dataset ``TaiwanStockPrice``) and the list of listed companies from the
government open-data monthly revenue CSV.

FinMind reports errors in the JSON body: ``status`` 400 is a bad request
and 402 means the request quota is used up (it resets hourly).

API docs: https://finmind.github.io/
"""

from __future__ import annotations

import csv
import io
from datetime import date

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from veronica.common.logging import get_logger
from veronica.common.schemas import RawRecord
from veronica.crawler.exceptions import (
    BadRequestError,
    CrawlerError,
    RateLimitedError,
    TransientIOError,
)
from veronica.crawler.rate_limiter import RateLimiter

logger = get_logger("CRAWLER")

FINMIND_V4_URL = "https://api.finmindtrade.com/api/v4/data"
STOCK_LIST_URL = (
    "https://quality.data.gov.tw/dq_download_csv.php"
    "?nid=11549&md5_url=da96048521360db9f23a2b47c9c31155"
)
DATASET = "TaiwanStockPrice"


class TaiwanStockPrice(BaseModel):
    """One row of the TaiwanStockPrice dataset."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    stock_id: str
    date: date
    open: float
    max: float
    min: float
    close: float
    spread: float = 0.0
    trading_volume: int = Field(alias="Trading_Volume", ge=0)
    trading_money: int = Field(alias="Trading_money", ge=0)

    def to_record(self) -> RawRecord:
        return RawRecord(
            open=self.open,
            high=self.max,
            low=self.min,
            close=self.close,
            spread=self.spread,
            date=self.date,
            trading_volume=self.trading_volume,
            trading_money=self.trading_money,
        )


class FinmindResponse(BaseModel):
    """Envelope of every FinMind v4 response."""

    msg: str = ""
    status: int
    data: list[TaiwanStockPrice] = []


class FinmindCrawler:
    """Crawler backed by FinMind and the government stock list.

    Args:
        token: FinMind API token (empty string for anonymous access).
        timeout: HTTP timeout in seconds.
        rate_limiter: Spaces out requests; defaults to one call per second.
        client: Optional pre-built httpx.Client (tests inject a mock transport).
    """

    def __init__(
        self,
        token: str = "",
        timeout: float = 30.0,
        rate_limiter: RateLimiter | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self._token = token
        self.rate_limiter = rate_limiter or RateLimiter(calls_per_second=1.0)
        self.client = client or httpx.Client(timeout=timeout)

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> FinmindCrawler:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def get_symbol_list(self) -> list[str]:
        """Symbols of all listed companies (first CSV column, header skipped).

        Raises:
            TransientIOError: On network failure.
            CrawlerError: On a non-2xx response.
        """
        response = self._get(STOCK_LIST_URL)
        if response.status_code >= 400:
            raise CrawlerError(
                "Stock list download failed",
                context={"status_code": response.status_code},
            )

        reader = csv.reader(io.StringIO(response.content.decode("utf-8-sig")))
        next(reader, None)
        symbols = [row[0].strip() for row in reader if row and row[0].strip()]

        logger.info("Stock list fetched", extra={"data": {"count": len(symbols)}})
        return symbols

    def get_daily_records(self, symbol: str, start: date, end: date) -> list[RawRecord]:
        """Daily bars of `symbol` between `start` and `end`, ascending.

        Raises:
            RateLimitedError: FinMind status 402 (quota used up).
            BadRequestError: FinMind status 400.
            TransientIOError: On network failure.
            CrawlerError: On any other status or an unparseable body.
        """
        params = {
            "dataset": DATASET,
            "data_id": symbol,
            "start_date": start.isoformat(),
            "end_date": end.isoformat(),
            "token": self._token,
        }
        response = self._get(FINMIND_V4_URL, params=params)

        try:
            body = FinmindResponse.model_validate_json(response.content)
        except ValidationError as exc:
            raise CrawlerError(
                "Unexpected FinMind response",
                context={"symbol": symbol, "status_code": response.status_code},
            ) from exc

        context = {"symbol": symbol, "status": body.status, "msg": body.msg}
        if body.status == 402:
            raise RateLimitedError("FinMind request quota reached", context=context)
        if body.status == 400:
            raise BadRequestError("FinMind rejected the request", context=context)
        if body.status != 200:
            raise CrawlerError(f"FinMind returned status {body.status}", context=context)

        records = sorted((row.to_record() for row in body.data), key=lambda r: r.date)
        logger.debug(
            "Daily records fetched",
            extra={"data": {"symbol": symbol, "count": len(records)}},
        )
        return records

    def _get(self, url: str, params: dict | None = None) -> httpx.Response:
        self.rate_limiter.acquire()
        try:
            return self.client.get(url, params=params)
        except httpx.RequestError as exc:
            raise TransientIOError(
                f"Network error: {exc.__class__.__name__}",
                context={"url": url},
            ) from exc
