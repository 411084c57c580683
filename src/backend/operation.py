"""Cancellable handle for one backend fetch."""

import asyncio
import weakref

import structlog

from src.backend.transport import HttpRequest

logger = structlog.get_logger(__name__)


class AsyncOperation:
    """Handle returned by every backend operation.

    The handle only observes the transport request through a weak
    reference. Once the transport has delivered the result and released
    the request, the handle is inert and cancel() returns False.

    Example:
        op = backend.get_quote("AAPL", on_quote)
        ...
        if not op.cancel():
            print("already finished")
        await op.wait()
    """

    def __init__(self) -> None:
        self._request: weakref.ref[HttpRequest] | None = None
        self._done = asyncio.Event()

    def attach(self, request: HttpRequest) -> None:
        """Link the handle to the transport request serving it."""
        self._request = weakref.ref(request)

    @property
    def finished(self) -> bool:
        """Whether the callback has been delivered."""
        return self._done.is_set()

    def cancel(self) -> bool:
        """Ask the transport to interrupt the request.

        Returns:
            True if the transport accepted the cancellation, False if the
            request has already completed. A callback that is already
            queued may still be delivered after a successful cancel.
        """
        request = self._request() if self._request is not None else None
        if request is None:
            return False
        cancelled = request.cancel()
        logger.debug("operation_cancel", url=request.url, cancelled=cancelled)
        return cancelled

    def mark_finished(self) -> None:
        self._done.set()

    async def wait(self) -> None:
        """Wait until the callback has been delivered."""
        await self._done.wait()
