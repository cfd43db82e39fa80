"""Abstract interface for browser-automation providers."""

from __future__ import annotations

from abc import ABC, abstractmethod


class BrowserSession(ABC):
    """A live rendered page bound to one ticker.

    Sessions are created by a BrowserProvider and owned by the SessionPool.
    Nothing else closes them.
    """

    ticker: str

    @abstractmethod
    async def wait_for_text(self, selector: str, timeout: float) -> str:
        """Wait up to ``timeout`` seconds for ``selector`` and return its text.

        Raises ScrapeTimeoutError if the element does not appear in time and
        NavigationLostError if the page is gone.
        """

    @abstractmethod
    async def close(self) -> None:
        """Close the underlying page."""


class BrowserProvider(ABC):
    """Contract for rendering/navigation providers.

    Lifecycle:
        provider = PlaywrightProvider(...)
        await provider.start()
        session = await provider.open("BTCUSD", "https://...")
        text = await session.wait_for_text(".price", timeout=5.0)
        await session.close()
        await provider.stop()
    """

    @abstractmethod
    async def start(self) -> None:
        """Launch the browser. Failure here is fatal to the process."""

    @abstractmethod
    async def stop(self) -> None:
        """Shut the browser down. Safe to call multiple times."""

    @abstractmethod
    async def open(self, ticker: str, url: str) -> BrowserSession:
        """Open a new session on ``url`` for ``ticker``.

        Raises SessionCreationError when navigation fails or the response
        status is 400 or above. A session that failed to open is closed
        before raising.
        """
