"""Fan-out of changed prices to subscribed clients."""

from __future__ import annotations

import logging

from .connections import ConnectionManager
from .models import PriceUpdate
from .registry import SubscriptionRegistry

logger = logging.getLogger(__name__)


class Broadcaster:
    """Sends a changed price to every live subscriber of its ticker.

    Missing or closed sockets are skipped; cleaning them up is left to the
    ConnectionManager when the socket closes.
    """

    def __init__(self, registry: SubscriptionRegistry, connections: ConnectionManager) -> None:
        self._registry = registry
        self._connections = connections

    async def broadcast(self, update: PriceUpdate) -> int:
        """Send ``update`` to its subscribers. Returns how many received it."""
        payload = update.to_dict()
        delivered = 0
        for user_id in self._registry.subscribers(update.ticker):
            connection = self._connections.get(user_id)
            if connection is None:
                continue
            if await connection.send(payload):
                delivered += 1
        logger.debug("Broadcast %s=%s to %d clients", update.ticker, update.price, delivered)
        return delivered
