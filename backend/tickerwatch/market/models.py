"""Data models for market data."""

from __future__ import annotations

import time
from dataclasses import dataclass, field

# Price sent back to a client whose ticker failed validation
NOT_FOUND_PRICE = -1

ADD_TICKER = "addTicker"
REMOVE_TICKER = "removeTicker"


def normalize_ticker(ticker: str) -> str:
    """Uppercase and strip a client-supplied ticker."""
    return ticker.strip().upper()


@dataclass(frozen=True, slots=True)
class PriceUpdate:
    """Immutable snapshot of a single ticker's price at a point in time."""

    ticker: str
    price: float
    timestamp: float = field(default_factory=time.time)  # Unix seconds

    def to_dict(self) -> dict:
        """Serialize for WebSocket transmission."""
        return {"ticker": self.ticker, "price": self.price}


@dataclass(frozen=True, slots=True)
class TickerCommand:
    """A parsed inbound client command."""

    action: str
    ticker: str
    user_id: str

    @classmethod
    def from_dict(cls, data: dict) -> TickerCommand:
        """Build a command from a decoded message.

        Raises ValueError when ``userId`` is missing or blank. The ticker is
        normalized; a missing ticker becomes the empty string.
        """
        user_id = data.get("userId")
        if not isinstance(user_id, str) or not user_id.strip():
            raise ValueError("message has no userId")
        ticker = data.get("ticker")
        return cls(
            action=str(data.get("action") or ""),
            ticker=normalize_ticker(ticker) if isinstance(ticker, str) else "",
            user_id=user_id,
        )
