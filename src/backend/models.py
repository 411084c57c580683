"""Data models for the market data backends.

This module defines the Pydantic models and enums shared by every
backend implementation: reference data (exchanges, tickers), quotes
and historical price granules.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict

# Value used for optional quote prices the provider did not report
MISSING_PRICE = -1.0


class Status(str, Enum):
    """Outcome of one asynchronous backend operation."""

    OK = "ok"
    FAILURE = "failure"


class Granularity(str, Enum):
    """Sampling resolution for historical price data."""

    MINUTE = "minute"
    FIVE_MINUTES = "five_minutes"
    FIFTEEN_MINUTES = "fifteen_minutes"
    DAY = "day"


class Exchange(BaseModel):
    """Stock exchange reference entry.

    Attributes:
        id: Provider exchange code (e.g., "N").
        name: Human readable exchange name.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str


class Ticker(BaseModel):
    """Tradable symbol with descriptive metadata.

    Attributes:
        id: Trading symbol (e.g., "AAPL").
        name: Security description, empty if not reported.
        exchange_id: Exchange code, empty if not reported.
    """

    id: str
    name: str = ""
    exchange_id: str = ""


class Quote(BaseModel):
    """Snapshot of current trading statistics for one symbol.

    Optional prices hold MISSING_PRICE when the provider did not
    report a numeric value.

    Attributes:
        last: Last trade price.
        change: Absolute change from previous close.
        change_percent: Percentage change from previous close.
        open: Opening price.
        high: Day high.
        low: Day low.
        close: Closing price.
        volume: Trading volume.
    """

    last: float = 0.0
    change: float = 0.0
    change_percent: float = 0.0
    open: float = MISSING_PRICE
    high: float = MISSING_PRICE
    low: float = MISSING_PRICE
    close: float = MISSING_PRICE
    volume: int = 0


class Granule(BaseModel):
    """One OHLCV bar with volume-weighted average price.

    Attributes:
        timestamp: Start of the bar (UTC).
        open: Opening price.
        high: High price.
        low: Low price.
        close: Closing price.
        volume: Traded volume.
        price: Volume-weighted average price.
    """

    timestamp: datetime
    open: float
    high: float
    low: float
    close: float
    volume: int
    price: float
