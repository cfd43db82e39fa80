"""The ticker watch service: one owner for all live state."""

from __future__ import annotations

import logging

from .broadcaster import Broadcaster
from .cache import PriceCache
from .connections import ConnectionManager
from .interface import BrowserProvider
from .poller import Poller
from .registry import SubscriptionRegistry
from .sessions import SessionPool

logger = logging.getLogger(__name__)


class TickerService:
    """Wires the cache, session pool, registry, connections and poller.

    Lifecycle:
        service = TickerService(provider)
        await service.start()
        # ... clients connect through create_stream_router(service) ...
        await service.stop()
    """

    def __init__(
        self,
        provider: BrowserProvider,
        poll_interval: float = 1.0,
        **pool_options,
    ) -> None:
        self.provider = provider
        self.price_cache = PriceCache()
        self.session_pool = SessionPool(provider, **pool_options)
        self.registry = SubscriptionRegistry(self.session_pool, self.price_cache)
        self.connections = ConnectionManager(self.registry)
        self.broadcaster = Broadcaster(self.registry, self.connections)
        self.poller = Poller(
            self.registry,
            self.session_pool,
            self.price_cache,
            self.broadcaster,
            interval=poll_interval,
        )
        self._started = False

    async def start(self) -> None:
        """Launch the browser, then start polling. Provider errors propagate."""
        if self._started:
            return
        await self.provider.start()
        await self.poller.start()
        self._started = True
        logger.info("Ticker service started, waiting for client requests")

    async def stop(self) -> None:
        """Graceful shutdown. Safe to call multiple times."""
        if not self._started:
            return
        self._started = False
        logger.info("Shutting down gracefully...")
        await self.poller.stop()
        await self.connections.close_all()
        await self.session_pool.close_all()
        await self.provider.stop()
        logger.info("Ticker service stopped")
