"""Real-time fan-out of booking and schedule events to WebSocket clients."""

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Protocol

from fastapi import WebSocket

logger = logging.getLogger(__name__)

APPOINTMENT_BOOKED = "appointmentBooked"
SCHEDULE_UPDATED = "scheduleUpdated"


class EventBus(Protocol):
    def publish(self, event: str, payload: dict[str, Any], recipients: Iterable[int] | None = None) -> None:
        """Deliver ``payload`` to ``recipients`` (user ids), or to everyone when None."""


class NullBus:
    def publish(self, event: str, payload: dict[str, Any], recipients: Iterable[int] | None = None) -> None:
        return None


@dataclass
class PublishedEvent:
    event: str
    payload: dict[str, Any]
    recipients: frozenset[int] | None


@dataclass
class RecordingBus:
    """Keeps every published event in memory, in publish order."""

    events: list[PublishedEvent] = field(default_factory=list)

    def publish(self, event: str, payload: dict[str, Any], recipients: Iterable[int] | None = None) -> None:
        self.events.append(
            PublishedEvent(
                event=event,
                payload=payload,
                recipients=frozenset(recipients) if recipients is not None else None,
            )
        )

    def named(self, event: str) -> list[PublishedEvent]:
        return [published for published in self.events if published.event == event]


@dataclass(eq=False)
class _Connection:
    websocket: WebSocket
    user_id: int | None


class WebSocketHub:
    """Tracks open sockets and sends events to them.

    ``publish`` may be called from worker threads (sync route handlers). Sends are
    scheduled on the event loop that serves the sockets and are not
    awaited: delivery is at-most-once and a client that connects later never sees
    earlier events.
    """

    def __init__(self, broadcast_unscoped: bool = False) -> None:
        self.broadcast_unscoped = broadcast_unscoped
        self._connections: set[_Connection] = set()
        self._loop: asyncio.AbstractEventLoop | None = None

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    async def connect(self, websocket: WebSocket, user_id: int | None = None) -> _Connection:
        self._loop = asyncio.get_running_loop()
        await websocket.accept()
        connection = _Connection(websocket=websocket, user_id=user_id)
        self._connections.add(connection)
        logger.info("Socket connected (user=%s, open=%d)", user_id, len(self._connections))
        return connection

    def disconnect(self, connection: _Connection) -> None:
        self._connections.discard(connection)
        logger.info("Socket disconnected (user=%s, open=%d)", connection.user_id, len(self._connections))

    def publish(self, event: str, payload: dict[str, Any], recipients: Iterable[int] | None = None) -> None:
        if self._loop is None or self._loop.is_closed():
            logger.debug("Dropping %s, no socket has connected yet", event)
            return

        targets = None if recipients is None else frozenset(recipients)
        asyncio.run_coroutine_threadsafe(self.broadcast(event, payload, targets), self._loop)

    async def broadcast(self, event: str, payload: dict[str, Any], recipients: frozenset[int] | None = None) -> int:
        message = {"event": event, "data": payload}
        delivered = 0
        for connection in list(self._connections):
            if not self._wants(connection, recipients):
                continue
            try:
                await connection.websocket.send_json(message)
                delivered += 1
            except Exception:
                logger.exception("Failed to deliver %s to user=%s, dropping socket", event, connection.user_id)
                self._connections.discard(connection)

        logger.info("Published %s to %d socket(s)", event, delivered)
        return delivered

    def _wants(self, connection: _Connection, recipients: frozenset[int] | None) -> bool:
        if recipients is None or self.broadcast_unscoped:
            return True
        return connection.user_id is not None and connection.user_id in recipients
