"""Tests for backend data models and errors."""

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from src.backend.errors import (
    BackendNotFoundError,
    CallbackRequiredError,
    MarketDataError,
    ParseError,
    UnsupportedGranularityError,
)
from src.backend.models import (
    MISSING_PRICE,
    Exchange,
    Granularity,
    Granule,
    Quote,
    Status,
    Ticker,
)


class TestModels:
    """Tests for the Pydantic models."""

    def test_exchange_is_frozen(self) -> None:
        """Test exchanges cannot be modified."""
        exchange = Exchange(id="N", name="NYSE")

        with pytest.raises(ValidationError):
            exchange.name = "Other"

    def test_ticker_defaults(self) -> None:
        """Test ticker metadata defaults to empty strings."""
        ticker = Ticker(id="AAPL")

        assert ticker.name == ""
        assert ticker.exchange_id == ""

    def test_default_quote(self) -> None:
        """Test the empty quote delivered on failure."""
        quote = Quote()

        assert quote.last == 0.0
        assert quote.volume == 0
        assert quote.open == MISSING_PRICE
        assert quote.close == MISSING_PRICE

    def test_granule_requires_all_fields(self) -> None:
        """Test granules have no defaults."""
        with pytest.raises(ValidationError):
            Granule(timestamp=datetime(2021, 6, 1, tzinfo=UTC), open=1.0)  # type: ignore[call-arg]

    def test_enum_values(self) -> None:
        """Test enum wire values."""
        assert Status.OK.value == "ok"
        assert Granularity("fifteen_minutes") is Granularity.FIFTEEN_MINUTES
        assert len(Granularity) == 4


class TestErrors:
    """Tests for the exception hierarchy."""

    def test_base_error(self) -> None:
        """Test base error attributes."""
        error = MarketDataError("boom", details={"key": "value"})

        assert str(error) == "boom"
        assert error.to_dict() == {
            "error_type": "MarketDataError",
            "message": "boom",
            "details": {"key": "value"},
        }

    def test_callback_required(self) -> None:
        """Test CallbackRequiredError is a ValueError naming the operation."""
        error = CallbackRequiredError("TradierBackend.get_quote")

        assert isinstance(error, ValueError)
        assert isinstance(error, MarketDataError)
        assert "TradierBackend.get_quote" in str(error)

    def test_unsupported_granularity(self) -> None:
        """Test UnsupportedGranularityError is a NotImplementedError."""
        error = UnsupportedGranularityError(Granularity.DAY, "tradier")

        assert isinstance(error, NotImplementedError)
        assert error.details == {"granularity": "day", "backend": "tradier"}
        assert "'day'" in str(error)

    def test_parse_error_path(self) -> None:
        """Test ParseError records the offending path."""
        error = ParseError("Missing key", path="quotes.quote")

        assert isinstance(error, ValueError)
        assert error.path == "quotes.quote"
        assert error.details == {"path": "quotes.quote"}

    def test_backend_not_found(self) -> None:
        """Test BackendNotFoundError is a KeyError with a readable message."""
        error = BackendNotFoundError("polygon", ["tradier"])

        assert isinstance(error, KeyError)
        assert str(error) == "Backend 'polygon' not found"
        assert error.details["available"] == ["tradier"]
