"""Playwright-backed browser provider for rendered price pages."""

from __future__ import annotations

import logging

from playwright.async_api import Browser, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .exceptions import NavigationLostError, ScrapeTimeoutError, SessionCreationError
from .interface import BrowserProvider, BrowserSession

logger = logging.getLogger(__name__)


class PlaywrightSession(BrowserSession):
    """One chromium page showing one ticker's symbol page."""

    def __init__(self, ticker: str, page: Page) -> None:
        self.ticker = ticker
        self._page = page

    async def wait_for_text(self, selector: str, timeout: float) -> str:
        try:
            element = await self._page.wait_for_selector(selector, timeout=timeout * 1000)
            if element is None:
                raise ScrapeTimeoutError(self.ticker, f"selector {selector!r} not found")
            return await element.inner_text()
        except PlaywrightTimeoutError as e:
            raise ScrapeTimeoutError(self.ticker, f"timed out after {timeout:.1f}s") from e
        except PlaywrightError as e:
            # Closed page, crashed renderer, detached frame
            raise NavigationLostError(self.ticker, e.message) from e

    async def close(self) -> None:
        await self._page.close()


class PlaywrightProvider(BrowserProvider):
    """BrowserProvider that opens one chromium page per ticker.

    A single browser process is shared by every session. ``start()`` must be
    awaited before ``open()``.
    """

    def __init__(self, headless: bool = True, navigation_timeout: float = 10.0) -> None:
        self._headless = headless
        self._navigation_timeout = navigation_timeout
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None

    async def start(self) -> None:
        if self._browser is not None:
            return
        logger.info("Launching Playwright browser (headless=%s)", self._headless)
        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(headless=self._headless)

    async def stop(self) -> None:
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
            logger.info("Playwright browser closed")
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None

    async def open(self, ticker: str, url: str) -> BrowserSession:
        if self._browser is None:
            raise SessionCreationError(ticker, reason="browser not started")

        page = await self._browser.new_page()
        try:
            response = await page.goto(
                url,
                wait_until="domcontentloaded",
                timeout=self._navigation_timeout * 1000,
            )
        except PlaywrightError as e:
            await page.close()
            raise SessionCreationError(ticker, reason=e.message) from e

        if response is not None:
            logger.info("Page for %s loaded with status %d", ticker, response.status)
            if response.status >= 400:
                await page.close()
                raise SessionCreationError(ticker, status=response.status)
        return PlaywrightSession(ticker, page)
