"""Tradier market data backend.

This module implements the Backend interface on top of the Tradier
brokerage REST API (https://documentation.tradier.com/brokerage-api).

Example:
    backend = TradierBackend()
    backend.set_config({"access_token": "..."})

    def on_quote(status, operation, quote):
        print(status, quote.last)

    operation = backend.get_quote("AAPL", on_quote)
    await operation.wait()
"""

from collections.abc import Callable, Mapping, Sequence
from datetime import datetime
from typing import Any, TypeVar
from urllib.parse import quote as url_escape

import structlog
from pydantic import ValidationError

from src.backend.base import (
    Backend,
    ExchangesCallback,
    PricesCallback,
    QuoteCallback,
    TickersCallback,
    require_callback,
)
from src.backend.errors import ParseError, UnsupportedGranularityError
from src.backend.models import Exchange, Granularity, Quote, Status
from src.backend.operation import AsyncOperation
from src.backend.parsers import parse_body, parse_prices, parse_quote, parse_ticker_list
from src.backend.timewindow import format_timestamp, get_start_time
from src.backend.transport import HttpRequest, HttpTransport, TransportStatus

logger = structlog.get_logger(__name__)

T = TypeVar("T")

DEFAULT_END_POINT = "https://sandbox.tradier.com/v1/"

HTTP_200_OK = 200

EXCHANGES: tuple[Exchange, ...] = (
    Exchange(id="A", name="NYSE MKT"),
    Exchange(id="B", name="NASDAQ OMX BX"),
    Exchange(id="C", name="National Stock Exchange"),
    Exchange(id="D", name="FINRA ADF"),
    Exchange(id="E", name="Market Independent (Generated by Nasdaq SIP)"),
    Exchange(id="F", name="Mutual Funds/Money Markets (NASDAQ)"),
    Exchange(id="I", name="International Securities Exchange"),
    Exchange(id="J", name="Direct Edge A"),
    Exchange(id="K", name="Direct Edge X"),
    Exchange(id="M", name="Chicago Stock Exchange"),
    Exchange(id="N", name="NYSE"),
    Exchange(id="P", name="NYSE Arca"),
    Exchange(id="Q", name="NASDAQ OMX"),
    Exchange(id="S", name="NASDAQ Small Cap"),
    Exchange(id="T", name="NASDAQ Int"),
    Exchange(id="U", name="OTCBB"),
    Exchange(id="V", name="OTC other"),
    Exchange(id="W", name="CBOE"),
    Exchange(id="X", name="NASDAQ OMX PSX"),
    Exchange(id="G", name="GLOBEX"),
    Exchange(id="Y", name="BATS Y-Exchange"),
    Exchange(id="Z", name="BATS"),
)

INTERVALS: dict[Granularity, str] = {
    Granularity.MINUTE: "1min",
    Granularity.FIVE_MINUTES: "5min",
    Granularity.FIFTEEN_MINUTES: "15min",
}


def escape(value: str) -> str:
    """Percent-encode a query parameter value."""
    return url_escape(value, safe="")


class TradierBackend(Backend):
    """Backend for the Tradier market data API.

    Attributes:
        access_token: Bearer token sent with every request.
        end_point: Versioned REST base URL, with trailing slash.
    """

    tag = "tradier"

    def __init__(
        self,
        transport: HttpTransport | None = None,
        end_point: str = DEFAULT_END_POINT,
    ) -> None:
        """Initialize the backend.

        Args:
            transport: Transport to run requests on. If not provided, an
                HttpTransport is created and closed by aclose().
            end_point: REST base URL.
        """
        self.access_token = ""
        self.end_point = end_point if end_point.endswith("/") else end_point + "/"
        self._transport = transport or HttpTransport()
        self._owns_transport = transport is None
        self._logger = logger.bind(component="tradier_backend")

    def set_config(self, config: Mapping[str, Any]) -> None:
        """Read the access token from a configuration tree.

        The ``access_token`` node may hold the token directly or as its
        first child. A missing node leaves the token unchanged.
        """
        value = config.get("access_token")
        if isinstance(value, Sequence) and not isinstance(value, str):
            value = value[0] if value else None

        if value is not None:
            self.access_token = str(value)

        self._logger.debug("config_applied", has_access_token=bool(self.access_token))

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.access_token}",
            "Accept": "application/json",
        }

    def _request(
        self,
        url: str,
        callback: Callable[[Status, AsyncOperation, T], Any],
        parse: Callable[[Any], T],
        empty: Callable[[], T],
    ) -> AsyncOperation:
        """Start a GET request and route its outcome to the callback.

        Args:
            url: Full request URL.
            callback: Receives (status, operation, result) exactly once.
            parse: Turns the decoded JSON body into the result.
            empty: Builds the result delivered on failure.

        Returns:
            Handle for the in-flight request.
        """
        operation = AsyncOperation()

        def deliver(status: Status, result: T) -> None:
            try:
                callback(status, operation, result)
            finally:
                operation.mark_finished()

        def on_complete(transport_status: TransportStatus, request: HttpRequest) -> None:
            response = request.response
            if transport_status != TransportStatus.OK or response.status != HTTP_200_OK:
                self._logger.warning(
                    "http_request_failed",
                    url=url,
                    transport_status=transport_status.value,
                    http_status=response.status,
                )
                deliver(Status.FAILURE, empty())
                return

            self._logger.debug("http_response_body", url=url, body=response.body)
            try:
                result = parse(parse_body(response.body))
            except (ParseError, ValidationError) as e:
                self._logger.warning("response_parse_failed", url=url, error=str(e))
                deliver(Status.FAILURE, empty())
                return
            except Exception as e:
                # Any parser crash still resolves the operation
                self._logger.error(
                    "response_parse_crashed", url=url, error=str(e), exc_info=True
                )
                deliver(Status.FAILURE, empty())
                return

            deliver(Status.OK, result)

        request = HttpRequest(self._transport, on_complete)
        operation.attach(request)

        request.set_url(url)
        request.set_headers(self._headers())
        request.start()

        return operation

    def get_exchanges(self, callback: ExchangesCallback) -> AsyncOperation:
        """Deliver the built-in exchange table without a network call."""
        require_callback(callback, "TradierBackend.get_exchanges")

        operation = AsyncOperation()
        try:
            callback(Status.OK, operation, list(EXCHANGES))
        finally:
            operation.mark_finished()

        return operation

    def find_ticker(self, query: str, callback: TickersCallback) -> AsyncOperation:
        """Search securities by symbol or company name.

        A response without matches yields Status.OK and an empty list.
        """
        require_callback(callback, "TradierBackend.find_ticker")

        url = f"{self.end_point}markets/search?q={escape(query)}&indexes=false"
        return self._request(url, callback, parse_ticker_list, list)

    def get_quote(self, symbol: str, callback: QuoteCallback) -> AsyncOperation:
        """Fetch the quote for one symbol (greeks excluded)."""
        require_callback(callback, "TradierBackend.get_quote")

        url = f"{self.end_point}markets/quotes?symbols={escape(symbol)}&greeks=false"
        return self._request(url, callback, parse_quote, Quote)

    def get_prices(
        self,
        symbol: str,
        from_: datetime,
        to: datetime,
        granularity: Granularity,
        callback: PricesCallback,
    ) -> AsyncOperation:
        """Fetch intraday time and sales bars for one symbol.

        The query window ends at ``to`` and starts at
        get_start_time(to, granularity); ``from_`` is accepted for
        interface compatibility but not used.

        Raises:
            CallbackRequiredError: If callback is None.
            UnsupportedGranularityError: If granularity is Granularity.DAY.
        """
        require_callback(callback, "TradierBackend.get_prices")

        granularity = Granularity(granularity)
        if granularity not in INTERVALS:
            raise UnsupportedGranularityError(granularity, self.tag)

        interval = INTERVALS[granularity]
        start_time = format_timestamp(get_start_time(to, granularity))
        end_time = format_timestamp(to)

        self._logger.debug(
            "prices_request",
            symbol=symbol,
            interval=interval,
            start_time=start_time,
            end_time=end_time,
            requested_from=from_.isoformat(),
        )

        url = (
            f"{self.end_point}markets/timesales?symbol={escape(symbol)}"
            f"&session_filter=open&interval={interval}"
            f"&start={escape(start_time)}&end={escape(end_time)}"
        )
        return self._request(url, callback, parse_prices, list)

    async def aclose(self) -> None:
        """Close the transport if this backend created it."""
        if self._owns_transport:
            await self._transport.aclose()

    async def __aenter__(self) -> "TradierBackend":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()
