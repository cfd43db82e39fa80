"""Fixed-interval scraper for every watched ticker."""

from __future__ import annotations

import asyncio
import logging

from .broadcaster import Broadcaster
from .cache import PriceCache
from .exceptions import ScrapeError
from .registry import SubscriptionRegistry
from .sessions import SessionPool

logger = logging.getLogger(__name__)


class Poller:
    """Scrapes every watched ticker once per tick and broadcasts changes.

    A tick is started every ``interval`` seconds whether or not the previous
    one has finished. Within a tick all tickers are scraped concurrently with
    no cap; a large watch set or a slow page can make ticks overlap.
    """

    def __init__(
        self,
        registry: SubscriptionRegistry,
        session_pool: SessionPool,
        price_cache: PriceCache,
        broadcaster: Broadcaster,
        interval: float = 1.0,
    ) -> None:
        self._registry = registry
        self._pool = session_pool
        self._cache = price_cache
        self._broadcaster = broadcaster
        self._interval = interval
        self._task: asyncio.Task | None = None
        self._ticks: set[asyncio.Task] = set()

    async def start(self) -> None:
        if self._task is not None and not self._task.done():
            return
        self._task = asyncio.create_task(self._run_loop(), name="ticker-poller")
        logger.info("Poller started: %.1fs interval", self._interval)

    async def stop(self) -> None:
        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None

        ticks = list(self._ticks)
        for tick in ticks:
            tick.cancel()
        if ticks:
            await asyncio.gather(*ticks, return_exceptions=True)
        logger.info("Poller stopped")

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def poll_once(self) -> None:
        """Execute one tick: scrape all watched tickers, publish changes."""
        tickers = self._registry.watch_set()
        if not tickers:
            logger.debug("Waiting for tickers to watch...")
            return
        await asyncio.gather(*(self._scrape_one(ticker) for ticker in tickers))

    # --- Internal ---

    async def _run_loop(self) -> None:
        while True:
            tick = asyncio.create_task(self._tick(), name="ticker-poll-tick")
            self._ticks.add(tick)
            tick.add_done_callback(self._ticks.discard)
            await asyncio.sleep(self._interval)

    async def _tick(self) -> None:
        try:
            await self.poll_once()
        except Exception:
            logger.exception("Poll tick failed")

    async def _scrape_one(self, ticker: str) -> None:
        try:
            price = await self._pool.scrape(ticker)
        except ScrapeError as e:
            logger.warning("%s", e)
            return
        except Exception:
            # Don't re-raise: the other tickers in this tick still get applied
            logger.exception("Unexpected error scraping %s", ticker)
            return

        update = self._cache.update(ticker, price)
        if update is None:
            return
        logger.info("New price for %s: %s", ticker, price)
        await self._broadcaster.broadcast(update)
