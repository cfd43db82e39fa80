"""Per-ticker browser session pool."""

from __future__ import annotations

import asyncio
import enum
import logging
import re

from .exceptions import (
    PriceParseError,
    SessionCreationError,
    SessionNotReadyError,
    TickerNotFoundError,
)
from .interface import BrowserProvider, BrowserSession

logger = logging.getLogger(__name__)

DEFAULT_URL_TEMPLATE = "https://www.tradingview.com/symbols/{ticker}/?exchange={exchange}"
DEFAULT_EXCHANGE = "BINANCE"
DEFAULT_PRICE_SELECTOR = ".lastContainer-zoF9r75I"

_NON_NUMERIC = re.compile(r"[^0-9.]")


class SessionState(enum.Enum):
    PENDING = "pending"
    READY = "ready"


class SessionPool:
    """Owns exactly one browser session per watched ticker.

    Each entry is a shared ``asyncio.Task`` that opens the session. The first
    caller for a ticker installs the task and every concurrent caller awaits
    that same task, so simultaneous first subscriptions to a new ticker share
    one navigation. A task that fails is removed from the pool rather than
    kept around, so the next caller starts over.

    States per ticker: absent (no entry), PENDING (task running), READY (task
    finished with a session).
    """

    def __init__(
        self,
        provider: BrowserProvider,
        url_template: str = DEFAULT_URL_TEMPLATE,
        exchange: str = DEFAULT_EXCHANGE,
        price_selector: str = DEFAULT_PRICE_SELECTOR,
        scrape_timeout: float = 5.0,
    ) -> None:
        self._provider = provider
        self._url_template = url_template
        self._exchange = exchange
        self._selector = price_selector
        self._scrape_timeout = scrape_timeout
        self._sessions: dict[str, asyncio.Task[BrowserSession]] = {}

    def url_for(self, ticker: str) -> str:
        """Canonical page URL for a ticker."""
        return self._url_template.format(ticker=ticker, exchange=self._exchange)

    async def validate_and_ensure(self, ticker: str) -> BrowserSession:
        """Return the ticker's session, opening it if needed.

        Raises TickerNotFoundError if the page could not be opened. If the
        entry is torn down while we wait on it, retry against a fresh entry
        so that a successful return always leaves a live entry in the pool.
        """
        while True:
            task = self._sessions.get(ticker)
            if task is None:
                task = asyncio.create_task(self._open(ticker), name=f"session-{ticker}")
                self._sessions[ticker] = task

            try:
                session = await asyncio.shield(task)
            except SessionCreationError as e:
                raise TickerNotFoundError(ticker, status=e.status) from e

            if self._sessions.get(ticker) is task:
                return session
            logger.debug("Session for %s was torn down while opening, retrying", ticker)

    async def teardown(self, ticker: str) -> None:
        """Close and forget the ticker's session. Never raises."""
        task = self._sessions.pop(ticker, None)
        if task is None or task.cancelled():
            return

        try:
            session = await asyncio.shield(task)
        except SessionCreationError:
            # Nothing was opened
            return

        try:
            await session.close()
            logger.info("Session for %s closed", ticker)
        except Exception as e:
            logger.error("Error closing session for %s: %s", ticker, e)

    async def scrape(self, ticker: str) -> float:
        """Read the current price for a ticker from its READY session.

        Raises a ScrapeError subclass on timeout, missing session, lost
        navigation or unparsable text. The session is left in place.
        """
        session = self._ready_session(ticker)
        text = await session.wait_for_text(self._selector, self._scrape_timeout)
        digits = _NON_NUMERIC.sub("", text)
        try:
            return float(digits)
        except ValueError as e:
            raise PriceParseError(ticker, f"unparsable price text {text!r}") from e

    async def close_all(self) -> None:
        """Tear down every session (used on shutdown)."""
        for ticker in list(self._sessions):
            await self.teardown(ticker)

    def state(self, ticker: str) -> SessionState | None:
        task = self._sessions.get(ticker)
        if task is None:
            return None
        return SessionState.READY if task.done() else SessionState.PENDING

    def symbols(self) -> list[str]:
        return list(self._sessions)

    # --- Internal ---

    async def _open(self, ticker: str) -> BrowserSession:
        try:
            session = await self._provider.open(ticker, self.url_for(ticker))
        except SessionCreationError:
            self._discard(ticker)
            logger.warning("Could not open session for %s", ticker)
            raise
        except Exception as e:
            self._discard(ticker)
            logger.warning("Could not open session for %s: %s", ticker, e)
            raise SessionCreationError(ticker, reason=str(e)) from e
        logger.info("Session for %s ready", ticker)
        return session

    def _discard(self, ticker: str) -> None:
        # Only drop the entry if it is still ours; a teardown plus a new
        # subscription may already have replaced it.
        if self._sessions.get(ticker) is asyncio.current_task():
            del self._sessions[ticker]

    def _ready_session(self, ticker: str) -> BrowserSession:
        task = self._sessions.get(ticker)
        if task is None:
            raise SessionNotReadyError(ticker, "no session")
        if not task.done():
            raise SessionNotReadyError(ticker, "session still opening")
        if task.cancelled():
            raise SessionNotReadyError(ticker, "session opening was cancelled")
        return task.result()

    def __contains__(self, ticker: str) -> bool:
        return ticker in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
