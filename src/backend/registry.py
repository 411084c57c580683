"""Lookup of backend implementations by provider name."""

from collections.abc import Mapping
from typing import Any

import structlog

from src.backend.base import Backend
from src.backend.errors import BackendNotFoundError
from src.backend.tradier import TradierBackend
from src.backend.transport import HttpTransport

logger = structlog.get_logger(__name__)

_BACKENDS: dict[str, type[Backend]] = {
    TradierBackend.tag: TradierBackend,
}


def available_backends() -> list[str]:
    """Names of all registered backends, sorted."""
    return sorted(_BACKENDS)


def create_backend(
    name: str,
    transport: HttpTransport | None = None,
    config: Mapping[str, Any] | None = None,
    **options: Any,
) -> Backend:
    """Create and optionally configure a backend.

    Args:
        name: Registered provider name (e.g., "tradier").
        transport: Transport to share with the backend.
        config: Configuration tree passed to set_config().
        **options: Backend specific constructor arguments (e.g., end_point).

    Returns:
        The backend instance.

    Raises:
        BackendNotFoundError: If no backend is registered under name.
    """
    backend_class = _BACKENDS.get(name)
    if backend_class is None:
        raise BackendNotFoundError(name, available_backends())

    backend = backend_class(transport=transport, **options)  # type: ignore[call-arg]
    if config is not None:
        backend.set_config(config)

    logger.info("backend_created", backend=name, configured=config is not None)
    return backend
