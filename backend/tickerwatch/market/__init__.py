"""Ticker watch subsystem.

Public API:
    PriceUpdate           - Immutable price snapshot dataclass
    PriceCache            - Change-gated in-memory price store
    SessionPool           - One browser session per watched ticker
    SubscriptionRegistry  - Ticker -> subscriber IDs, source of the watch set
    ConnectionManager     - User ID -> live socket, inbound command routing
    Broadcaster           - Fan-out of changed prices
    Poller                - Fixed-interval scrape driver
    TickerService         - Owner of all of the above
    BrowserProvider       - Abstract interface for browser automation
    create_ticker_service - Factory that builds a service from settings
    create_stream_router  - FastAPI router factory for the WebSocket endpoint
"""

from .broadcaster import Broadcaster
from .cache import PriceCache
from .connections import ClientConnection, ConnectionManager
from .factory import create_ticker_service
from .interface import BrowserProvider, BrowserSession
from .models import PriceUpdate
from .poller import Poller
from .registry import SubscriptionRegistry
from .service import TickerService
from .sessions import SessionPool, SessionState
from .stream import create_stream_router

__all__ = [
    "PriceUpdate",
    "PriceCache",
    "SessionPool",
    "SessionState",
    "SubscriptionRegistry",
    "ClientConnection",
    "ConnectionManager",
    "Broadcaster",
    "Poller",
    "TickerService",
    "BrowserProvider",
    "BrowserSession",
    "create_ticker_service",
    "create_stream_router",
]
