"""Environment-driven settings for the ticker watch service."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping

from .exceptions import ConfigurationError
from .sessions import DEFAULT_EXCHANGE, DEFAULT_PRICE_SELECTOR, DEFAULT_URL_TEMPLATE

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True, slots=True)
class Settings:
    poll_interval: float = 1.0
    scrape_timeout: float = 5.0
    navigation_timeout: float = 10.0
    url_template: str = DEFAULT_URL_TEMPLATE
    exchange: str = DEFAULT_EXCHANGE
    price_selector: str = DEFAULT_PRICE_SELECTOR
    headless: bool = True
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8080


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Read TICKER_* environment variables into a Settings.

    Unset or blank variables keep their defaults. Raises ConfigurationError
    on values that cannot be parsed.
    """
    env = os.environ if environ is None else environ
    defaults = Settings()

    def text(name: str, default: str) -> str:
        value = env.get(name, "").strip()
        return value or default

    def number(name: str, default: float, cast=float):
        value = env.get(name, "").strip()
        if not value:
            return default
        try:
            result = cast(value)
        except ValueError as e:
            raise ConfigurationError(f"{name} must be a number, got {value!r}") from e
        if result <= 0:
            raise ConfigurationError(f"{name} must be positive, got {value!r}")
        return result

    def flag(name: str, default: bool) -> bool:
        value = env.get(name, "").strip().lower()
        if not value:
            return default
        if value in _TRUE:
            return True
        if value in _FALSE:
            return False
        raise ConfigurationError(f"{name} must be a boolean, got {value!r}")

    def level(name: str, default: str) -> str:
        value = text(name, default).upper()
        # getLevelName() maps a registered name to its number, anything else to a string
        if not isinstance(logging.getLevelName(value), int):
            raise ConfigurationError(f"{name} must be a logging level name, got {value!r}")
        return value

    return Settings(
        poll_interval=number("TICKER_POLL_INTERVAL", defaults.poll_interval),
        scrape_timeout=number("TICKER_SCRAPE_TIMEOUT", defaults.scrape_timeout),
        navigation_timeout=number("TICKER_NAVIGATION_TIMEOUT", defaults.navigation_timeout),
        url_template=text("TICKER_URL_TEMPLATE", defaults.url_template),
        exchange=text("TICKER_EXCHANGE", defaults.exchange),
        price_selector=text("TICKER_PRICE_SELECTOR", defaults.price_selector),
        headless=flag("TICKER_HEADLESS", defaults.headless),
        log_level=level("TICKER_LOG_LEVEL", defaults.log_level),
        host=text("TICKER_HOST", defaults.host),
        port=number("TICKER_PORT", defaults.port, cast=int),
    )
