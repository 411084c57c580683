"""Market data backends.

This module provides:
- Backend: capability interface (exchanges, ticker search, quotes, prices)
- TradierBackend: implementation for the Tradier REST API
- AsyncOperation: cancellable handle returned by every operation
- HttpTransport: httpx based transport running requests on the event loop
- Data models: Exchange, Ticker, Quote, Granule, Granularity, Status
"""

from src.backend.base import Backend
from src.backend.errors import (
    BackendNotFoundError,
    CallbackRequiredError,
    MarketDataError,
    ParseError,
    UnsupportedGranularityError,
)
from src.backend.models import Exchange, Granularity, Granule, Quote, Status, Ticker
from src.backend.operation import AsyncOperation
from src.backend.registry import available_backends, create_backend
from src.backend.tradier import TradierBackend
from src.backend.transport import HttpRequest, HttpTransport, TransportStatus

__all__ = [
    "AsyncOperation",
    "Backend",
    "BackendNotFoundError",
    "CallbackRequiredError",
    "Exchange",
    "Granularity",
    "Granule",
    "HttpRequest",
    "HttpTransport",
    "MarketDataError",
    "ParseError",
    "Quote",
    "Status",
    "Ticker",
    "TradierBackend",
    "TransportStatus",
    "UnsupportedGranularityError",
    "available_backends",
    "create_backend",
]
