"""WebSocket endpoint for live ticker prices."""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, WebSocket

from .connections import ClientConnection
from .service import TickerService

logger = logging.getLogger(__name__)


def frame_text(message: dict) -> str | None:
    """Return the text payload of a received frame.

    Binary frames are decoded as UTF-8. Returns None for frames that carry
    nothing usable.
    """
    text = message.get("text")
    if text is not None:
        return text
    data = message.get("bytes")
    if data is None:
        return None
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        logger.warning("Dropping binary frame that is not UTF-8")
        return None


def create_stream_router(service: TickerService) -> APIRouter:
    """Create the WebSocket router bound to a ticker service.

    This factory pattern lets us inject the service without globals.
    """
    router = APIRouter(tags=["streaming"])

    @router.websocket("/ws")
    async def ticker_socket(websocket: WebSocket) -> None:
        """Bidirectional price feed.

        Clients send text (or UTF-8 binary) frames such as:

            {"action": "addTicker", "ticker": "BTCUSD", "userId": "u1"}

        and receive ``{"ticker": "BTCUSD", "price": 50000.0}`` whenever the
        price changes, or ``{"ticker": ..., "price": -1}`` for an unknown
        ticker. Each frame is handled concurrently with the others.
        """
        await websocket.accept()
        connection = ClientConnection(socket=websocket)
        client = websocket.client.host if websocket.client else "unknown"
        logger.info("Client connected: %s", client)

        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    break
                raw = frame_text(message)
                if raw is not None:
                    service.connections.submit(connection, raw)
        finally:
            # Cleanup must finish even if this handler is cancelled
            await asyncio.shield(service.connections.disconnect(connection))

    return router
