"""
Exceptions for the ticker watch service.

Validation and session failures are reported back to the requesting client;
scrape failures only ever skip a single ticker for a single tick.
"""

from __future__ import annotations


class TickerWatchError(Exception):
    """Base exception for all ticker watch errors."""
    pass


class ConfigurationError(TickerWatchError):
    """Raised when an environment setting cannot be parsed."""
    pass


class SessionCreationError(TickerWatchError):
    """Raised when a browser session for a ticker could not be opened."""

    def __init__(self, ticker: str, status: int | None = None, reason: str = "") -> None:
        self.ticker = ticker
        self.status = status
        detail = f"status {status}" if status is not None else (reason or "navigation failed")
        super().__init__(f"Could not open session for {ticker}: {detail}")


class TickerNotFoundError(SessionCreationError):
    """Raised when a ticker fails the existence check."""
    pass


class ScrapeError(TickerWatchError):
    """Raised when a price could not be read from a session this tick."""

    def __init__(self, ticker: str, reason: str) -> None:
        self.ticker = ticker
        self.reason = reason
        super().__init__(f"Error scraping {ticker}: {reason}")


class SessionNotReadyError(ScrapeError):
    """Raised when scraping a ticker whose session is missing or still opening."""
    pass


class ScrapeTimeoutError(ScrapeError):
    """Raised when the price element did not appear in time."""
    pass


class PriceParseError(ScrapeError):
    """Raised when the price element text is not a number."""
    pass


class NavigationLostError(ScrapeError):
    """Raised when the page behind a session was closed or crashed."""
    pass
