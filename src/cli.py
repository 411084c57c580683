"""Command-line interface for the market data backends.

This module provides CLI commands for listing exchanges, searching
tickers, fetching quotes and fetching intraday price history.

Example:
    TRADIER_ACCESS_TOKEN=... python -m src.cli quote AAPL
"""

import argparse
import asyncio
import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any

import structlog

from src.backend import (
    AsyncOperation,
    Backend,
    Granularity,
    HttpTransport,
    Status,
    available_backends,
    create_backend,
)
from src.config import Settings, settings

logger = structlog.get_logger(__name__)


def configure_logging(level: str) -> None:
    """Route structlog output to stderr, filtered by level.

    Args:
        level: Logging level name (e.g., "DEBUG").
    """
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper(), logging.INFO)
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def parse_datetime_arg(value: str) -> datetime:
    """Parse an ISO-8601 argument, assuming UTC when no offset is given."""
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid date-time: {value}") from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _to_json(result: Any) -> Any:
    if isinstance(result, list):
        return [item.model_dump(mode="json") for item in result]
    return result.model_dump(mode="json")


def start_operation(backend: Backend, args: argparse.Namespace, callback: Any) -> AsyncOperation:
    """Dispatch the parsed command to the matching backend operation."""
    if args.command == "exchanges":
        return backend.get_exchanges(callback)
    if args.command == "search":
        return backend.find_ticker(args.query, callback)
    if args.command == "quote":
        return backend.get_quote(args.symbol, callback)
    return backend.get_prices(
        args.symbol,
        args.from_date,
        args.to_date,
        Granularity(args.granularity),
        callback,
    )


async def run_command(args: argparse.Namespace, config: Settings) -> int:
    """Execute one command against the configured backend.

    Args:
        args: Parsed command-line arguments.
        config: Application settings.

    Returns:
        Exit code (0 for success, 1 for failure).
    """
    outcome: dict[str, Any] = {}

    def on_result(status: Status, operation: AsyncOperation, result: Any) -> None:
        outcome["status"] = status
        outcome["result"] = result

    async with HttpTransport(timeout=config.HTTP_TIMEOUT) as transport:
        backend = create_backend(
            args.backend,
            transport=transport,
            config=config.backend_config(),
            end_point=config.TRADIER_BASE_URL,
        )
        operation = start_operation(backend, args, on_result)
        await operation.wait()

    if outcome["status"] != Status.OK:
        logger.error("command_failed", command=args.command)
        return 1

    print(json.dumps(_to_json(outcome["result"]), indent=2))
    return 0


def build_parser(config: Settings) -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        description="Fetch market data from a data provider",
    )
    parser.add_argument(
        "--backend",
        default=config.MARKET_DATA_BACKEND,
        choices=available_backends(),
        help="Data provider to use",
    )
    parser.add_argument(
        "--log-level",
        default=config.LOG_LEVEL,
        help="Logging level",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("exchanges", help="List known exchanges")

    search_parser = subparsers.add_parser("search", help="Search tickers")
    search_parser.add_argument("query", help="Symbol or company name")

    quote_parser = subparsers.add_parser("quote", help="Fetch a quote")
    quote_parser.add_argument("symbol", help="Ticker symbol")

    prices_parser = subparsers.add_parser("prices", help="Fetch intraday prices")
    prices_parser.add_argument("symbol", help="Ticker symbol")
    prices_parser.add_argument(
        "--granularity",
        default=Granularity.FIVE_MINUTES.value,
        choices=[g.value for g in Granularity if g != Granularity.DAY],
        help="Bar resolution",
    )
    prices_parser.add_argument(
        "--from",
        dest="from_date",
        type=parse_datetime_arg,
        default=None,
        help="Start of the range (ISO-8601)",
    )
    prices_parser.add_argument(
        "--to",
        dest="to_date",
        type=parse_datetime_arg,
        default=None,
        help="End of the range (ISO-8601, default now)",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for CLI."""
    parser = build_parser(settings)
    args = parser.parse_args(argv)

    configure_logging(args.log_level)

    if args.command == "prices":
        args.to_date = args.to_date or datetime.now(UTC)
        args.from_date = args.from_date or args.to_date

    return asyncio.run(run_command(args, settings))


if __name__ == "__main__":
    sys.exit(main())
