"""Client connection tracking and inbound command routing."""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field

from fastapi.websockets import WebSocket, WebSocketDisconnect, WebSocketState

from .exceptions import TickerNotFoundError
from .models import ADD_TICKER, NOT_FOUND_PRICE, REMOVE_TICKER, TickerCommand
from .registry import SubscriptionRegistry

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class ClientConnection:
    """One live socket and the user IDs it has spoken for.

    ``identity`` is the most recent user ID seen on the socket and is unknown
    until the first valid message arrives. ``identities`` keeps every ID the
    socket has used so all of them are released when it closes. ``pending``
    holds the commands still being handled.
    """

    socket: WebSocket
    identity: str | None = None
    identities: set[str] = field(default_factory=set)
    pending: set[asyncio.Task] = field(default_factory=set)

    @property
    def is_open(self) -> bool:
        return (
            self.socket.client_state == WebSocketState.CONNECTED
            and self.socket.application_state == WebSocketState.CONNECTED
        )

    async def send(self, payload: dict) -> bool:
        """Send a JSON payload. Returns False if the socket is gone."""
        if not self.is_open:
            logger.debug("Skipping send to closed socket for %s", self.identity)
            return False
        try:
            await self.socket.send_text(json.dumps(payload))
        except (WebSocketDisconnect, RuntimeError, OSError) as e:
            logger.debug("Send to %s failed: %s", self.identity, e)
            return False
        return True


def _log_failure(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Command handling failed", exc_info=exc)


class ConnectionManager:
    """Maps user IDs to their live connection and routes their commands.

    A user ID has at most one connection; the most recent socket to send a
    message for it wins. The previous socket is left open.
    """

    def __init__(self, registry: SubscriptionRegistry) -> None:
        self._registry = registry
        self._connections: dict[str, ClientConnection] = {}

    def submit(self, connection: ClientConnection, raw: str) -> asyncio.Task:
        """Handle one inbound message in its own task.

        A slow session creation for one ticker must not hold up replies to
        the socket's other commands. The task is tracked on the connection
        until it finishes.
        """
        task = asyncio.create_task(
            self.handle_message(connection, raw),
            name=f"ticker-command-{connection.identity or 'anonymous'}",
        )
        connection.pending.add(task)
        task.add_done_callback(connection.pending.discard)
        task.add_done_callback(_log_failure)
        return task

    async def handle_message(self, connection: ClientConnection, raw: str) -> None:
        """Parse one inbound message and apply it."""
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Dropping message that is not valid JSON")
            return
        if not isinstance(data, dict):
            logger.warning("Dropping message that is not a JSON object")
            return

        try:
            command = TickerCommand.from_dict(data)
        except ValueError:
            logger.error("Received message without a userId")
            return

        self.bind(command.user_id, connection)

        if not command.ticker:
            logger.warning("Dropping %r from %s: no ticker", command.action, command.user_id)
            return

        if command.action == ADD_TICKER:
            await self._add(connection, command)
        elif command.action == REMOVE_TICKER:
            await self._registry.remove(command.ticker, command.user_id)
        else:
            logger.warning("Unknown action %r from %s", command.action, command.user_id)

    def bind(self, user_id: str, connection: ClientConnection) -> None:
        """Associate ``user_id`` with ``connection``, replacing any earlier one."""
        if connection.identity is not None and connection.identity != user_id:
            logger.info("Socket for %s now speaks for %s", connection.identity, user_id)
        connection.identity = user_id
        connection.identities.add(user_id)
        self._connections[user_id] = connection

    async def disconnect(self, connection: ClientConnection) -> list[str]:
        """Forget a closed connection and drop its users' subscriptions.

        Commands still in flight on the connection are finished first, so an
        ``addTicker`` that was waiting on session creation cannot subscribe a
        user after the cleanup ran. Every user ID the socket spoke for is
        released, except IDs since bound to a newer connection; those
        bindings and their subscriptions are left alone. Returns the tickers
        that lost their last subscriber.
        """
        if connection.pending:
            await asyncio.gather(*connection.pending, return_exceptions=True)

        if not connection.identities:
            logger.info("Client disconnected, but no user ID was found")
            return []

        emptied: list[str] = []
        for user_id in sorted(connection.identities):
            if self._connections.get(user_id) is not connection:
                logger.info("Stale connection for %s closed; newer connection kept", user_id)
                continue
            logger.info("Client disconnected, user ID: %s", user_id)
            del self._connections[user_id]
            emptied.extend(await self._registry.remove_subscriber_everywhere(user_id))
        return emptied

    def get(self, user_id: str) -> ClientConnection | None:
        return self._connections.get(user_id)

    async def close_all(self) -> None:
        """Close every live socket (used on shutdown)."""
        for connection in set(self._connections.values()):
            if not connection.is_open:
                continue
            try:
                await connection.socket.close()
            except (RuntimeError, OSError) as e:
                logger.debug("Error closing socket for %s: %s", connection.identity, e)
        self._connections.clear()

    async def _add(self, connection: ClientConnection, command: TickerCommand) -> None:
        try:
            price = await self._registry.add(command.ticker, command.user_id)
        except TickerNotFoundError as e:
            logger.info("%s", e)
            await connection.send({"ticker": command.ticker, "price": NOT_FOUND_PRICE})
            return

        if price is not None:
            await connection.send({"ticker": command.ticker, "price": price})

    def __len__(self) -> int:
        return len(self._connections)

    def __contains__(self, user_id: str) -> bool:
        return user_id in self._connections
