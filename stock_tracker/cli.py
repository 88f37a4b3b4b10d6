"""
Stock Tracker command line.

Usage:
    stock-tracker quote AAPL MSFT GOOG
    stock-tracker quote AAPL --json
    stock-tracker quota
    stock-tracker market
"""
import argparse
import asyncio
import json
import sys
from typing import Optional, Sequence

from loguru import logger

from stock_tracker.config import Settings
from stock_tracker.data_providers.market_hours import get_market_status, SUPPORTED_MARKETS
from stock_tracker.data_providers.orchestrator import BatchProgress, BatchResult
from stock_tracker.data_providers.provider_init import create_quote_client, create_kv_store
from stock_tracker.data_providers.quota_tracker import QuotaTracker, QuotaConfig
from stock_tracker.utils.logger import configure_logging


def _format_row(item: BatchResult) -> str:
    result = item.result
    if not result.success:
        return f"{item.symbol:<10} {'-':>10} {'-':>9} {'-':>8}  {result.error}"
    change = f"{result.change:+.2f}" if result.change is not None else "-"
    percent = f"{result.change_percent:+.2f}%" if result.change_percent is not None else "-"
    return f"{item.symbol:<10} {result.price:>10.2f} {change:>9} {percent:>8}  {result.currency or ''}"


def _log_progress(progress: BatchProgress) -> None:
    logger.info(
        f"Refreshing... {progress.percentage}% "
        f"({progress.current}/{progress.total}, {progress.quota_used}/{progress.quota_limit} quota)"
    )


async def run_quote(symbols: Sequence[str], settings: Settings, as_json: bool = False) -> int:
    """Fetch and print prices; returns the exit code."""
    async with create_quote_client(settings) as client:
        results = await client.batch_fetch(list(symbols), on_progress=_log_progress)
        status = client.get_quota_status()

    if as_json:
        print(json.dumps([r.to_dict() for r in results], indent=2))
    else:
        print(f"{'SYMBOL':<10} {'PRICE':>10} {'CHANGE':>9} {'CHG%':>8}")
        for item in results:
            print(_format_row(item))
        print(f"\n{status.used}/{status.limit} API calls used today")

    return 0 if all(r.success for r in results) else 1


def run_quota(settings: Settings, as_json: bool = False) -> int:
    tracker = QuotaTracker(
        QuotaConfig(daily_limit=settings.DAILY_REQUEST_LIMIT, key_prefix=settings.QUOTA_KEY_PREFIX),
        store=create_kv_store(settings),
    )
    status = tracker.status()
    if as_json:
        print(json.dumps(status.to_dict(), indent=2))
    else:
        print(
            f"{status.used}/{status.limit} API calls used on {status.reset_date} "
            f"({status.remaining} remaining)"
        )
    return 0


def run_market(as_json: bool = False) -> int:
    status = get_market_status()
    if as_json:
        print(json.dumps({**status.to_dict(), "markets": SUPPORTED_MARKETS}, indent=2))
    else:
        state = "OPEN" if status.is_open else "CLOSED"
        print(f"US market is {state}; next open {status.next_open:%Y-%m-%d %H:%M} {status.timezone}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stock-tracker",
        description="Quota-aware stock price fetcher",
    )
    parser.add_argument("--json", action="store_true", help="Print JSON instead of text")
    parser.add_argument("--debug", action="store_true", help="Verbose logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    quote = subparsers.add_parser("quote", help="Fetch current prices")
    quote.add_argument("symbols", nargs="+", help="Ticker symbols (1-10 alphanumeric characters)")

    subparsers.add_parser("quota", help="Show today's API quota usage")
    subparsers.add_parser("market", help="Show US market status")

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = Settings(DEBUG=True) if args.debug else Settings()
    configure_logging(settings)

    if args.command == "quote":
        return asyncio.run(run_quote(args.symbols, settings, as_json=args.json))
    if args.command == "quota":
        return run_quota(settings, as_json=args.json)
    return run_market(as_json=args.json)


if __name__ == "__main__":
    sys.exit(main())
