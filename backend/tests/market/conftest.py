"""Fixtures for ticker watch tests.

Provides an in-memory browser provider and socket so the session pool,
registry and poller can be driven without launching a browser.
"""

import asyncio
import json

import pytest
from fastapi.websockets import WebSocketState

from tickerwatch.market.connections import ClientConnection
from tickerwatch.market.exceptions import (
    NavigationLostError,
    ScrapeTimeoutError,
    SessionCreationError,
)
from tickerwatch.market.interface import BrowserProvider, BrowserSession
from tickerwatch.market.service import TickerService


class FakeSession(BrowserSession):
    """Returns whatever text the provider currently holds for its ticker."""

    def __init__(self, ticker, provider):
        self.ticker = ticker
        self._provider = provider
        self.closed = False

    async def wait_for_text(self, selector, timeout):
        if self.closed:
            raise NavigationLostError(self.ticker, "page closed")
        value = self._provider.texts.get(self.ticker)
        if isinstance(value, Exception):
            raise value
        if value is None:
            raise ScrapeTimeoutError(self.ticker, f"timed out after {timeout:.1f}s")
        return value

    async def close(self):
        self.closed = True
        self._provider.closed.append(self.ticker)
        if self._provider.close_error is not None:
            raise self._provider.close_error


class FakeProvider(BrowserProvider):
    """Opens sessions only for tickers listed in ``valid``.

    Set ``gate`` to an asyncio.Event to hold every open() until it is set,
    or put an Event in ``gates`` to hold a single ticker. ``delays`` maps a
    ticker to a number of seconds its open() sleeps.
    """

    def __init__(self, valid=()):
        self.valid = set(valid)
        self.texts = {}
        self.opened = []
        self.closed = []
        self.urls = []
        self.gate = None
        self.gates = {}
        self.delays = {}
        self.close_error = None
        self.started = False
        self.stopped = False

    async def start(self):
        self.started = True

    async def stop(self):
        self.stopped = True

    async def open(self, ticker, url):
        self.opened.append(ticker)
        self.urls.append(url)
        gate = self.gates.get(ticker, self.gate)
        if gate is not None:
            await gate.wait()
        elif ticker in self.delays:
            await asyncio.sleep(self.delays[ticker])
        else:
            await asyncio.sleep(0)
        if ticker not in self.valid:
            raise SessionCreationError(ticker, status=404)
        return FakeSession(ticker, self)


class FakeSocket:
    """Stands in for a FastAPI WebSocket; records every JSON payload sent."""

    def __init__(self):
        self.client_state = WebSocketState.CONNECTED
        self.application_state = WebSocketState.CONNECTED
        self.sent = []
        self.fail = False

    async def send_text(self, text):
        if self.fail:
            raise RuntimeError("Cannot call send once a close message has been sent")
        self.sent.append(json.loads(text))

    async def close(self):
        self.client_state = WebSocketState.DISCONNECTED
        self.application_state = WebSocketState.DISCONNECTED


@pytest.fixture
def provider():
    return FakeProvider(valid={"BTCUSD", "ETHUSD", "SOLUSD"})


@pytest.fixture
def service(provider):
    # Long interval: tests drive ticks through poll_once()
    return TickerService(provider, poll_interval=60.0)


@pytest.fixture
def make_connection():
    def _make():
        return ClientConnection(socket=FakeSocket())

    return _make


def message(action, ticker, user_id):
    return json.dumps({"action": action, "ticker": ticker, "userId": user_id})


@pytest.fixture
def send(service):
    """Deliver one client command through the ConnectionManager."""

    async def _send(connection, action, ticker, user_id):
        await service.connections.handle_message(connection, message(action, ticker, user_id))

    return _send
