"""Capability interface implemented by every market data backend.

A backend turns each fetch into an AsyncOperation and reports the
outcome through a callback receiving ``(status, operation, result)``.
The callback runs exactly once, on the event loop, after the call that
started the operation has returned (get_exchanges excepted, it has no
network round trip).
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any

from src.backend.errors import CallbackRequiredError
from src.backend.models import Exchange, Granularity, Granule, Quote, Status, Ticker
from src.backend.operation import AsyncOperation

ExchangesCallback = Callable[[Status, AsyncOperation, list[Exchange]], Any]
TickersCallback = Callable[[Status, AsyncOperation, list[Ticker]], Any]
QuoteCallback = Callable[[Status, AsyncOperation, Quote], Any]
PricesCallback = Callable[[Status, AsyncOperation, list[Granule]], Any]


def require_callback(callback: Callable[..., Any] | None, operation: str) -> None:
    """Fail fast when an operation is started without a usable callback.

    Raises:
        CallbackRequiredError: If callback is None or not callable.
    """
    if callback is None or not callable(callback):
        raise CallbackRequiredError(operation)


class Backend(ABC):
    """Market data provider interface.

    Implementations must be configured with set_config() before any
    operation is started; configuration is not synchronized with
    in-flight requests.
    """

    #: Registry name of the provider
    tag: str

    @abstractmethod
    def set_config(self, config: Mapping[str, Any]) -> None:
        """Apply provider configuration (e.g., the access token)."""

    @abstractmethod
    def get_exchanges(self, callback: ExchangesCallback) -> AsyncOperation:
        """List the exchanges known to the provider."""

    @abstractmethod
    def find_ticker(self, query: str, callback: TickersCallback) -> AsyncOperation:
        """Search tickers by symbol or company name."""

    @abstractmethod
    def get_quote(self, symbol: str, callback: QuoteCallback) -> AsyncOperation:
        """Fetch the current quote for one symbol."""

    @abstractmethod
    def get_prices(
        self,
        symbol: str,
        from_: datetime,
        to: datetime,
        granularity: Granularity,
        callback: PricesCallback,
    ) -> AsyncOperation:
        """Fetch historical price granules for one symbol."""
