"""Pytest configuration and fixtures."""

import logging

import pytest


@pytest.fixture(autouse=True)
def _debug_logging(caplog):
    """Capture tickerwatch debug logs so failing tests show the full trail."""
    caplog.set_level(logging.DEBUG, logger="tickerwatch")
