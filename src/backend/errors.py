"""Exceptions raised by the market data backends.

Exception Hierarchy:
    MarketDataError (base)
    ├── CallbackRequiredError - Operation invoked without a callback
    ├── UnsupportedGranularityError - History requested at an unsupported resolution
    ├── ParseError - Response body does not have the expected shape
    └── BackendNotFoundError - Unknown backend name

Only ParseError is recovered from inside the backends (it becomes a
failure status delivered to the callback). The others signal misuse and
propagate to the caller immediately.
"""

from typing import Any


class MarketDataError(Exception):
    """Base exception for all market data errors.

    Attributes:
        message: Human-readable error message.
        details: Additional error details.
    """

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class CallbackRequiredError(MarketDataError, ValueError):
    """Raised when a backend operation is invoked without a callback."""

    def __init__(self, operation: str) -> None:
        super().__init__(
            f"{operation}(): passed in callback is None",
            details={"operation": operation},
        )
        self.operation = operation


class UnsupportedGranularityError(MarketDataError, NotImplementedError):
    """Raised when price history is requested at an unsupported granularity."""

    def __init__(self, granularity: Any, backend: str) -> None:
        value = getattr(granularity, "value", granularity)
        super().__init__(
            f"{backend} does not support price history with granularity '{value}'",
            details={"granularity": value, "backend": backend},
        )
        self.granularity = granularity
        self.backend = backend


class ParseError(MarketDataError, ValueError):
    """Raised when a response body cannot be turned into a domain value.

    Attributes:
        path: Dotted path of the offending JSON node, if known.
    """

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message, details={"path": path} if path else None)
        self.path = path


class BackendNotFoundError(MarketDataError, KeyError):
    """Raised when no backend is registered under the requested name."""

    def __init__(self, name: str, available: list[str]) -> None:
        super().__init__(
            f"Backend '{name}' not found",
            details={"name": name, "available": available},
        )
        self.name = name
