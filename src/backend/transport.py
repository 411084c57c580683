"""HTTP transport for the market data backends.

This module provides:
- HttpRequest: one GET request with a completion handler
- HttpTransport: runs requests on the event loop through httpx

A request is started on the running event loop and reports completion
by calling its handler exactly once with a TransportStatus and the
request itself. The transport holds the only strong reference to an
in-flight request and drops it once the handler has returned.

Example:
    async with HttpTransport() as transport:
        request = HttpRequest(transport, on_done)
        request.set_url("https://sandbox.tradier.com/v1/markets/clock")
        request.set_headers({"Accept": "application/json"})
        request.start()
"""

import asyncio
import functools
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

import httpx
import structlog

logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT = 30.0


class TransportStatus(str, Enum):
    """Transport level outcome of a request."""

    OK = "ok"
    NETWORK_ERROR = "network_error"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"


@dataclass
class HttpResponse:
    """HTTP status and raw body of a completed request.

    Attributes:
        status: HTTP status code, 0 if no response was received.
        body: Raw response body.
    """

    status: int = 0
    body: bytes = b""


CompletionHandler = Callable[[TransportStatus, "HttpRequest"], Any]


class HttpRequest:
    """Single asynchronous GET request.

    Attributes:
        url: Target URL.
        headers: Request headers.
        response: Response, populated before the handler is called.
    """

    def __init__(self, transport: "HttpTransport", handler: CompletionHandler) -> None:
        """Initialize the request.

        Args:
            transport: Transport that will run the request.
            handler: Called once with the transport status and this request.
        """
        self.url = ""
        self.headers: dict[str, str] = {}
        self.response = HttpResponse()
        self._transport = transport
        self._handler = handler
        self._task: asyncio.Task[TransportStatus] | None = None
        self._finished = False

    @property
    def finished(self) -> bool:
        """Whether the completion handler has been called."""
        return self._finished

    def set_url(self, url: str) -> None:
        self.url = url

    def set_headers(self, headers: dict[str, str]) -> None:
        self.headers = dict(headers)

    def start(self) -> None:
        """Submit the request to the transport.

        Raises:
            RuntimeError: If the request was already started or there
                is no running event loop.
        """
        if self._task is not None:
            raise RuntimeError("HttpRequest already started")
        self._task = self._transport.submit(self)

    def cancel(self) -> bool:
        """Try to interrupt the request.

        Returns:
            True if cancellation was requested before completion. The
            handler is still called, with TransportStatus.CANCELLED.
        """
        if self._finished or self._task is None or self._task.done():
            return False
        return self._task.cancel()

    def _complete(self, status: TransportStatus) -> None:
        self._finished = True
        handler, self._handler = self._handler, None
        handler(status, self)


class HttpTransport:
    """Runs HttpRequests on the event loop with an httpx.AsyncClient.

    A borrowed client stays under the caller's control: it is never
    replaced or closed here, and requests sent after the caller closed it
    complete with TransportStatus.NETWORK_ERROR.

    Example:
        transport = HttpTransport(timeout=10.0)
        ...
        await transport.aclose()
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize the transport.

        Args:
            client: Client to borrow. If not provided, one is created
                lazily and closed by aclose().
            timeout: Request timeout in seconds for the owned client.
        """
        self._client = client
        self._owns_client = client is None
        self._timeout = timeout
        self._in_flight: set[HttpRequest] = set()
        self._logger = logger.bind(component="http_transport")

    @property
    def in_flight(self) -> int:
        """Number of requests whose handler has not run yet."""
        return len(self._in_flight)

    def _get_client(self) -> httpx.AsyncClient:
        if not self._owns_client:
            if self._client is None or self._client.is_closed:
                raise RuntimeError("Borrowed httpx client is closed")
            return self._client
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    def submit(self, request: HttpRequest) -> asyncio.Task[TransportStatus]:
        """Schedule a request on the running event loop."""
        task = asyncio.get_running_loop().create_task(self._fetch(request))
        self._in_flight.add(request)
        task.add_done_callback(functools.partial(self._on_done, request))
        return task

    async def _fetch(self, request: HttpRequest) -> TransportStatus:
        try:
            response = await self._get_client().get(request.url, headers=request.headers)
        except httpx.TimeoutException as e:
            self._logger.warning("http_timeout", url=request.url, error=str(e))
            return TransportStatus.TIMEOUT
        except httpx.HTTPError as e:
            self._logger.warning("http_error", url=request.url, error=str(e))
            return TransportStatus.NETWORK_ERROR

        request.response = HttpResponse(
            status=response.status_code,
            body=response.content,
        )
        return TransportStatus.OK

    def _on_done(self, request: HttpRequest, task: asyncio.Task[TransportStatus]) -> None:
        # Runs for every task, including ones cancelled before they started
        if task.cancelled():
            status = TransportStatus.CANCELLED
        elif task.exception() is not None:
            self._logger.error(
                "http_request_crashed",
                url=request.url,
                error=str(task.exception()),
            )
            status = TransportStatus.NETWORK_ERROR
        else:
            status = task.result()

        self._logger.debug(
            "http_request_completed",
            url=request.url,
            transport_status=status.value,
            http_status=request.response.status,
        )

        try:
            request._complete(status)
        finally:
            self._in_flight.discard(request)

    async def aclose(self) -> None:
        """Close the owned HTTP client."""
        if self._owns_client and self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "HttpTransport":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()
