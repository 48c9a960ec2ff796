"""Command-line entry point.

Usage:
    veronica update --start 2021-01-01 --end 2021-12-31
    veronica backtest --start 2021-06-01 --end 2021-12-31 --capacity 5
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from datetime import date

from pydantic import ValidationError

from veronica.common.config import Settings, get_settings
from veronica.common.database import get_session_factory
from veronica.common.exceptions import ConfigurationError, VeronicaBaseException
from veronica.common.logging import configure_logging, get_logger
from veronica.core.backtesting import run_backtest
from veronica.core.schemas import BacktestConfig
from veronica.crawler.finmind import FinmindCrawler
from veronica.crawler.ingest import update_raw_data
from veronica.crawler.rate_limiter import RateLimiter
from veronica.storage.backend import SqlTimeSeriesStore
from veronica.strategy.strategy import create_strategy

logger = get_logger("SYSTEM")


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        msg = f"invalid date {value!r}, expected YYYY-MM-DD"
        raise argparse.ArgumentTypeError(msg) from exc


def _parse_symbols(value: str) -> list[str]:
    return [s.strip() for s in value.split(",") if s.strip()]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="veronica", description=__doc__.splitlines()[0])
    commands = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("update", "crawl daily records into the store"),
        ("backtest", "simulate the strategy over a date range"),
    ):
        sub = commands.add_parser(name, help=help_text)
        sub.add_argument("--start", type=_parse_date, required=True)
        sub.add_argument("--end", type=_parse_date, required=True)
        sub.add_argument(
            "--symbols",
            type=_parse_symbols,
            default=None,
            help="comma-separated symbols (default: every listed company)",
        )

    backtest = commands.choices["backtest"]
    backtest.add_argument("--capacity", type=int, default=None)
    backtest.add_argument("--liquidity", type=int, default=None)
    backtest.add_argument("--strategy", default=None)
    return parser


def _make_crawler(settings: Settings) -> FinmindCrawler:
    return FinmindCrawler(
        token=settings.finmind_token,
        timeout=settings.http_timeout_seconds,
        rate_limiter=RateLimiter(calls_per_second=settings.finmind_rate_limit_per_second),
    )


def _run_update(args: argparse.Namespace, settings: Settings) -> None:
    store = SqlTimeSeriesStore(get_session_factory())
    with _make_crawler(settings) as crawler:
        update_raw_data(
            crawler,
            store,
            args.start,
            args.end,
            symbols=args.symbols,
            backoff_seconds=settings.rate_limit_backoff_seconds,
            max_retries=settings.rate_limit_max_retries,
        )


def _run_backtest(args: argparse.Namespace, settings: Settings) -> None:
    try:
        config = BacktestConfig(
            start_date=args.start,
            end_date=args.end,
            initial_liquidity=(
                args.liquidity if args.liquidity is not None else settings.initial_liquidity
            ),
            capacity=args.capacity if args.capacity is not None else settings.capacity,
            strategy=args.strategy or settings.strategy,
        )
    except ValidationError as exc:
        raise ConfigurationError(
            "Invalid backtest parameters",
            context={"errors": [err["msg"] for err in exc.errors()]},
        ) from exc

    store = SqlTimeSeriesStore(get_session_factory())
    strategy = create_strategy(config.strategy, store, settings)

    symbols = args.symbols
    if symbols is None:
        with _make_crawler(settings) as crawler:
            symbols = crawler.get_symbol_list()

    result = run_backtest(
        config,
        store,
        strategy,
        symbols,
        missing_price_policy=settings.missing_price_policy,
    )

    logger.info(
        "Backtest summary",
        extra={
            "data": {
                "snapshots": result.total_snapshots,
                "trades": result.total_trades,
                "final_fund": result.final_fund,
                "total_return_pct": result.total_return_pct,
                "max_drawdown_pct": result.max_drawdown_pct,
                "sharpe_ratio": result.sharpe_ratio,
            }
        },
    )
    for portfolio in result.portfolios:
        if portfolio.stocks_selected or portfolio.stocks_settled:
            logger.info(
                str(portfolio),
                extra={"data": {"date": str(portfolio.date), "fund": portfolio.fund}},
            )


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI. Returns the process exit code."""
    args = build_parser().parse_args(argv)

    try:
        settings = get_settings()
        configure_logging(settings.log_level)
        if args.command == "update":
            _run_update(args, settings)
        else:
            _run_backtest(args, settings)
    except (VeronicaBaseException, ValueError) as exc:
        logger.error(f"{args.command} failed: {exc}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
