"""Application configuration settings.

This module provides centralized configuration management using environment
variables with sensible defaults.
"""

import os
from dataclasses import dataclass
from typing import Any


def _get_float_env(name: str, default: float) -> float:
    """Get a float value from environment variable.

    Args:
        name: Environment variable name.
        default: Default value if not set or not a number.

    Returns:
        Float value from environment.
    """
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


@dataclass
class Settings:
    """Application settings loaded from environment variables.

    Attributes:
        MARKET_DATA_BACKEND: Registered backend to use.
        TRADIER_ACCESS_TOKEN: Tradier API access token.
        TRADIER_BASE_URL: Tradier REST base URL (sandbox by default).
        HTTP_TIMEOUT: Request timeout in seconds.
        LOG_LEVEL: Logging level.
    """

    # Data sources
    MARKET_DATA_BACKEND: str = "tradier"
    TRADIER_ACCESS_TOKEN: str | None = None
    TRADIER_BASE_URL: str = "https://sandbox.tradier.com/v1/"

    # Transport
    HTTP_TIMEOUT: float = 30.0

    # Logging
    LOG_LEVEL: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Create settings from environment variables.

        Returns:
            Settings instance populated from environment.
        """
        return cls(
            MARKET_DATA_BACKEND=os.getenv("MARKET_DATA_BACKEND", "tradier"),
            TRADIER_ACCESS_TOKEN=os.getenv("TRADIER_ACCESS_TOKEN"),
            TRADIER_BASE_URL=os.getenv(
                "TRADIER_BASE_URL", "https://sandbox.tradier.com/v1/"
            ),
            HTTP_TIMEOUT=_get_float_env("HTTP_TIMEOUT", 30.0),
            LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
        )

    def backend_config(self) -> dict[str, Any]:
        """Configuration tree for Backend.set_config().

        Returns:
            Mapping with ``access_token`` when a token is configured.
        """
        if not self.TRADIER_ACCESS_TOKEN:
            return {}
        return {"access_token": [self.TRADIER_ACCESS_TOKEN]}


# Global settings instance
settings = Settings.from_env()
