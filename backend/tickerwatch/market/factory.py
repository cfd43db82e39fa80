"""Factory for creating the ticker watch service."""

from __future__ import annotations

import logging

from .config import Settings, load_settings
from .interface import BrowserProvider
from .service import TickerService

logger = logging.getLogger(__name__)


def create_ticker_service(
    settings: Settings | None = None,
    provider: BrowserProvider | None = None,
) -> TickerService:
    """Create a ticker service from settings (read from the environment by default).

    Without an explicit provider a PlaywrightProvider is built. Returns an
    unstarted service. Caller must await service.start().
    """
    settings = settings or load_settings()

    if provider is None:
        # Lazy import: playwright is only needed when driving a real browser
        from .playwright_provider import PlaywrightProvider

        logger.info("Browser provider: Playwright chromium (headless=%s)", settings.headless)
        provider = PlaywrightProvider(
            headless=settings.headless,
            navigation_timeout=settings.navigation_timeout,
        )

    return TickerService(
        provider,
        poll_interval=settings.poll_interval,
        url_template=settings.url_template,
        exchange=settings.exchange,
        price_selector=settings.price_selector,
        scrape_timeout=settings.scrape_timeout,
    )
