"""Ticker subscription registry."""

from __future__ import annotations

import logging

from .cache import PriceCache
from .sessions import SessionPool

logger = logging.getLogger(__name__)


class SubscriptionRegistry:
    """Maps each ticker to the set of user IDs watching it.

    The watch set is derived from this map and never stored on its own: a
    ticker is watched exactly when its subscriber set is non-empty, and a
    watched ticker always has an entry in the SessionPool. Empty sets are
    deleted, never kept.
    """

    def __init__(self, session_pool: SessionPool, price_cache: PriceCache) -> None:
        self._pool = session_pool
        self._cache = price_cache
        self._subscriptions: dict[str, set[str]] = {}

    async def add(self, ticker: str, user_id: str) -> float | None:
        """Subscribe ``user_id`` to ``ticker``.

        Validates the ticker through the SessionPool first (opening its
        session if needed). Raises TickerNotFoundError without touching the
        registry if that fails. Returns the cached price, or None when no
        price has been scraped yet. Subscribing twice is a no-op.
        """
        logger.info("User %s wants to add ticker %s", user_id, ticker)
        await self._pool.validate_and_ensure(ticker)

        # No await between here and the insert
        users = self._subscriptions.get(ticker)
        if users is None:
            logger.info("Adding ticker to watch list: %s", ticker)
            users = self._subscriptions[ticker] = set()
        users.add(user_id)
        return self._cache.get_price(ticker)

    async def remove(self, ticker: str, user_id: str) -> bool:
        """Unsubscribe ``user_id`` from ``ticker``.

        Tears the ticker's session down when its last subscriber leaves.
        Returns False if the user was not subscribed.
        """
        logger.info("User %s wants to remove ticker %s", user_id, ticker)
        users = self._subscriptions.get(ticker)
        if users is None or user_id not in users:
            return False

        users.discard(user_id)
        if not users:
            del self._subscriptions[ticker]
            logger.info("Removing ticker from watch list: %s", ticker)
            await self._pool.teardown(ticker)
        return True

    async def remove_subscriber_everywhere(self, user_id: str) -> list[str]:
        """Drop ``user_id`` from every ticker it watches.

        Every emptied ticker is removed from the registry before any session
        is torn down, then each emptied ticker's session is torn down once.
        Returns the tickers that lost their last subscriber.
        """
        emptied: list[str] = []
        for ticker, users in list(self._subscriptions.items()):
            if user_id not in users:
                continue
            users.discard(user_id)
            if not users:
                del self._subscriptions[ticker]
                emptied.append(ticker)

        for ticker in emptied:
            logger.info("No users watching %s. Removed from watch list", ticker)
            await self._pool.teardown(ticker)
        return emptied

    def watch_set(self) -> list[str]:
        """Tickers with at least one subscriber."""
        return [ticker for ticker, users in self._subscriptions.items() if users]

    def subscribers(self, ticker: str) -> frozenset[str]:
        return frozenset(self._subscriptions.get(ticker, ()))

    def symbols_for(self, user_id: str) -> list[str]:
        return [ticker for ticker, users in self._subscriptions.items() if user_id in users]

    def __contains__(self, ticker: str) -> bool:
        return ticker in self._subscriptions

    def __len__(self) -> int:
        return len(self._subscriptions)
