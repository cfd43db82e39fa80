"""Change-gated in-memory price cache."""

from __future__ import annotations

import time

from .models import PriceUpdate


class PriceCache:
    """In-memory cache of the last broadcast price for each ticker.

    Writer: the Poller, after each successful scrape.
    Readers: the SubscriptionRegistry (immediate reply on subscribe).

    Only touched from the event loop, so no lock is held. Entries outlive
    their subscribers: a ticker subscribed again later starts from the last
    known price.
    """

    def __init__(self) -> None:
        self._prices: dict[str, PriceUpdate] = {}
        self._version: int = 0  # Bumped on every stored change

    def update(self, ticker: str, price: float, timestamp: float | None = None) -> PriceUpdate | None:
        """Record a price if it differs from the stored one.

        Returns the new PriceUpdate when the value changed (or is the first
        one for the ticker), and None when it equals the stored price.
        """
        prev = self._prices.get(ticker)
        if prev is not None and prev.price == price:
            return None

        update = PriceUpdate(ticker=ticker, price=price, timestamp=timestamp or time.time())
        self._prices[ticker] = update
        self._version += 1
        return update

    def get(self, ticker: str) -> PriceUpdate | None:
        """Get the latest price for a single ticker, or None if unknown."""
        return self._prices.get(ticker)

    def get_all(self) -> dict[str, PriceUpdate]:
        """Snapshot of all current prices. Returns a shallow copy."""
        return dict(self._prices)

    def get_price(self, ticker: str) -> float | None:
        """Convenience: get just the price float, or None."""
        update = self.get(ticker)
        return update.price if update else None

    @property
    def version(self) -> int:
        """Current version counter."""
        return self._version

    def __len__(self) -> int:
        return len(self._prices)

    def __contains__(self, ticker: str) -> bool:
        return ticker in self._prices
