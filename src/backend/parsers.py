"""Response parsers for the Tradier market data API.

Each parser takes the JSON tree produced by ``parse_body`` and returns a
domain model, raising ParseError when a required node is missing or has
the wrong type.

Validation differs per endpoint:
- Ticker search treats missing containers as "no results".
- Quote and price parsing treat any structural problem as an error.
"""

import json
import math
from datetime import UTC, datetime
from typing import Any

from src.backend.errors import ParseError
from src.backend.models import MISSING_PRICE, Granule, Quote, Ticker

DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%S"


def parse_body(body: bytes) -> Any:
    """Decode a raw response body into a JSON tree.

    Raises:
        ParseError: If the body is not valid UTF-8 JSON or nests too deeply.
    """
    try:
        return json.loads(body)
    except (ValueError, RecursionError) as e:
        raise ParseError(f"Invalid JSON body: {e}") from e


# ============================================================================
# Node helpers
# ============================================================================


def _is_number(value: Any) -> bool:
    # bool is an int subclass but not a JSON number
    if isinstance(value, bool) or not isinstance(value, int | float):
        return False
    # 1e400 decodes to inf; huge integer literals do not fit a float
    try:
        return math.isfinite(value)
    except OverflowError:
        return False


def _object(node: Any, path: str) -> dict[str, Any]:
    if not isinstance(node, dict):
        raise ParseError(f"Expected object at '{path}'", path=path)
    return node


def _child(node: dict[str, Any], key: str, path: str) -> Any:
    if key not in node:
        raise ParseError(f"Missing key '{key}' at '{path}'", path=path)
    return node[key]


def _float(node: dict[str, Any], key: str, path: str) -> float:
    value = _child(node, key, path)
    if not _is_number(value):
        raise ParseError(f"Expected number at '{path}.{key}'", path=f"{path}.{key}")
    return float(value)


def _uint(node: dict[str, Any], key: str, path: str) -> int:
    value = _child(node, key, path)
    if not _is_number(value) or value < 0:
        raise ParseError(
            f"Expected unsigned integer at '{path}.{key}'", path=f"{path}.{key}"
        )
    return int(value)


def _optional_float(node: dict[str, Any], key: str) -> float:
    value = node.get(key)
    if _is_number(value):
        return float(value)
    return MISSING_PRICE


def _optional_string(node: dict[str, Any], key: str) -> str:
    value = node.get(key)
    return value if isinstance(value, str) else ""


# ============================================================================
# Parsers
# ============================================================================


def parse_ticker_list(root: Any) -> list[Ticker]:
    """Parse a ``markets/search`` response.

    Missing or mistyped ``securities``/``security`` containers mean the
    search matched nothing and produce an empty list. Entries without a
    string ``symbol`` are skipped.

    Args:
        root: Decoded JSON tree.

    Returns:
        Tickers in response order.
    """
    if not isinstance(root, dict):
        return []

    securities = root.get("securities")
    if not isinstance(securities, dict):
        return []

    security = securities.get("security")
    if not isinstance(security, list):
        return []

    tickers = []
    for entry in security:
        if not isinstance(entry, dict):
            continue

        symbol = entry.get("symbol")
        if not isinstance(symbol, str):
            continue

        tickers.append(
            Ticker(
                id=symbol,
                name=_optional_string(entry, "description"),
                exchange_id=_optional_string(entry, "exchange"),
            )
        )

    return tickers


def parse_quote(root: Any) -> Quote:
    """Parse a single-symbol ``markets/quotes`` response.

    Args:
        root: Decoded JSON tree.

    Returns:
        The quote for the requested symbol.

    Raises:
        ParseError: If ``quotes.quote`` is not an object, a required
            field is missing or not numeric, or volume is not an
            unsigned integer.
    """
    quotes = _object(_child(_object(root, "$"), "quotes", "$"), "quotes")
    quote = _object(_child(quotes, "quote", "quotes"), "quotes.quote")
    path = "quotes.quote"

    return Quote(
        last=_float(quote, "last", path),
        change=_float(quote, "change", path),
        change_percent=_float(quote, "change_percentage", path),
        close=_optional_float(quote, "close"),
        open=_optional_float(quote, "open"),
        high=_optional_float(quote, "high"),
        low=_optional_float(quote, "low"),
        volume=_uint(quote, "volume", path),
    )


def parse_datetime(value: Any) -> datetime:
    """Parse a ``YYYY-MM-DDTHH:MM:SS`` string as a UTC timestamp."""
    if not isinstance(value, str):
        raise ParseError("Expected date-time string")
    try:
        return datetime.strptime(value, DATETIME_FORMAT).replace(tzinfo=UTC)
    except ValueError as e:
        raise ParseError(f"Invalid date-time '{value}': {e}") from e


def parse_prices(root: Any) -> list[Granule]:
    """Parse a ``markets/timesales`` response.

    Every data point must carry all of time, volume, open, close, high,
    low and vwap; a single bad point fails the whole series.

    Args:
        root: Decoded JSON tree.

    Returns:
        Granules in response order.

    Raises:
        ParseError: If ``series.data`` is missing or any point is malformed.
    """
    series = _object(_child(_object(root, "$"), "series", "$"), "series")
    data = _child(series, "data", "series")
    if not isinstance(data, list):
        raise ParseError("Expected array at 'series.data'", path="series.data")

    granules = []
    for index, point in enumerate(data):
        path = f"series.data[{index}]"
        point = _object(point, path)

        granules.append(
            Granule(
                timestamp=parse_datetime(_child(point, "time", path)),
                volume=_uint(point, "volume", path),
                open=_float(point, "open", path),
                close=_float(point, "close", path),
                high=_float(point, "high", path),
                low=_float(point, "low", path),
                price=_float(point, "vwap", path),
            )
        )

    return granules
