"""Tests for market data models."""

import pytest

from tickerwatch.market.models import PriceUpdate, TickerCommand, normalize_ticker


class TestPriceUpdate:
    """Unit tests for the PriceUpdate model."""

    def test_price_update_creation(self):
        """Test basic PriceUpdate creation."""
        update = PriceUpdate(ticker="BTCUSD", price=50000.0, timestamp=1234567890.0)
        assert update.ticker == "BTCUSD"
        assert update.price == 50000.0
        assert update.timestamp == 1234567890.0

    def test_default_timestamp(self):
        """Test that a timestamp is filled in when omitted."""
        update = PriceUpdate(ticker="BTCUSD", price=50000.0)
        assert update.timestamp > 0

    def test_to_dict(self):
        """Test serialization carries only ticker and price."""
        update = PriceUpdate(ticker="BTCUSD", price=50050.0, timestamp=1234567890.0)
        assert update.to_dict() == {"ticker": "BTCUSD", "price": 50050.0}

    def test_immutability(self):
        """Test that PriceUpdate is immutable."""
        update = PriceUpdate(ticker="BTCUSD", price=50000.0)

        with pytest.raises(AttributeError):
            update.price = 1.0


class TestNormalizeTicker:
    def test_uppercases(self):
        assert normalize_ticker("btcusd") == "BTCUSD"

    def test_strips_whitespace(self):
        assert normalize_ticker("  ethusd \n") == "ETHUSD"


class TestTickerCommand:
    """Unit tests for parsing inbound commands."""

    def test_from_dict(self):
        """Test a complete command."""
        command = TickerCommand.from_dict({"action": "addTicker", "ticker": " btcusd", "userId": "u1"})
        assert command == TickerCommand(action="addTicker", ticker="BTCUSD", user_id="u1")

    def test_missing_user_id(self):
        """Test that a message without userId is rejected."""
        with pytest.raises(ValueError):
            TickerCommand.from_dict({"action": "addTicker", "ticker": "BTCUSD"})

    def test_blank_user_id(self):
        """Test that a blank userId is rejected."""
        with pytest.raises(ValueError):
            TickerCommand.from_dict({"action": "addTicker", "ticker": "BTCUSD", "userId": "  "})

    def test_non_string_user_id(self):
        """Test that a non-string userId is rejected."""
        with pytest.raises(ValueError):
            TickerCommand.from_dict({"action": "addTicker", "ticker": "BTCUSD", "userId": 42})

    def test_missing_ticker_becomes_empty(self):
        """Test that a missing ticker parses to the empty string."""
        command = TickerCommand.from_dict({"action": "removeTicker", "userId": "u1"})
        assert command.ticker == ""

    def test_missing_action_becomes_empty(self):
        """Test that a missing action parses to the empty string."""
        command = TickerCommand.from_dict({"ticker": "BTCUSD", "userId": "u1"})
        assert command.action == ""
