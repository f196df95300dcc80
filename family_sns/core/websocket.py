"""
WebSocket connection manager for real-time fan-out.

Keeps an explicit subscription registry (topic -> connection ids) that is
only mutated through connect/subscribe/unsubscribe/disconnect and read by
publish. Delivery is fire-and-forget: no acknowledgment, no retry, nothing
kept for disconnected clients.

Topics:
- ``family:<family_id>`` - feed events (post-created, comment-created, ...)
- ``user:<user_id>`` - direct events (message-received)
"""

import asyncio
import json
import logging
import re
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Set

import anyio
from fastapi import WebSocket


logger = logging.getLogger(__name__)

FAMILY_TOPIC_PREFIX = "family"
USER_TOPIC_PREFIX = "user"

SEND_TIMEOUT_SECONDS = 5

_TOPIC_RE = re.compile(r"^(family|user):([A-Za-z0-9_-]{1,64})$")


def family_topic(family_id: str) -> str:
    return f"{FAMILY_TOPIC_PREFIX}:{family_id}"


def user_topic(user_id: str) -> str:
    return f"{USER_TOPIC_PREFIX}:{user_id}"


def parse_topic(topic: Any) -> tuple[str, str] | None:
    """Split a topic into (kind, id); None when malformed."""
    if not isinstance(topic, str):
        return None
    match = _TOPIC_RE.match(topic)
    if not match:
        return None
    return match.group(1), match.group(2)


@dataclass(eq=False)
class Connection:
    """An authenticated socket and the identity it was opened with."""
    id: str
    websocket: WebSocket
    user_id: str
    family_id: str

    def may_subscribe(self, topic: str) -> bool:
        parsed = parse_topic(topic)
        if parsed is None:
            return False
        kind, target_id = parsed
        if kind == FAMILY_TOPIC_PREFIX:
            return target_id == self.family_id
        return target_id == self.user_id


class ConnectionManager:
    """Manages WebSocket connections and their topic subscriptions."""

    def __init__(self, send_timeout: float = SEND_TIMEOUT_SECONDS):
        self.send_timeout = send_timeout
        # connection_id -> Connection
        self._connections: Dict[str, Connection] = {}
        # topic -> set of connection ids
        self._topics: Dict[str, Set[str]] = {}
        # connection_id -> set of topics (for cleanup on disconnect)
        self._subscriptions: Dict[str, Set[str]] = {}
        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket, user_id: str, family_id: str) -> Connection:
        """
        Accept and register a new WebSocket connection.

        The connection is implicitly subscribed to its own user topic.
        """
        await websocket.accept()
        connection = Connection(
            id=uuid.uuid4().hex,
            websocket=websocket,
            user_id=str(user_id),
            family_id=str(family_id),
        )
        async with self._lock:
            self._connections[connection.id] = connection
            self._subscriptions[connection.id] = set()
            self._add_subscription(connection.id, user_topic(connection.user_id))
        logger.debug("WebSocket %s connected for user %s", connection.id, connection.user_id)
        return connection

    async def subscribe(self, connection_id: str, topic: Any) -> bool:
        """
        Subscribe a connection to a topic.

        Malformed topics and topics the connection is not entitled to are
        ignored (logged, not fatal). Returns True when subscribed.
        """
        async with self._lock:
            connection = self._connections.get(connection_id)
            if connection is None:
                return False
            if not connection.may_subscribe(topic):
                logger.warning(
                    "Ignoring subscribe to %r from connection %s (user %s)",
                    topic, connection_id, connection.user_id,
                )
                return False
            self._add_subscription(connection_id, topic)
        logger.debug("Connection %s subscribed to %s", connection_id, topic)
        return True

    async def unsubscribe(self, connection_id: str, topic: Any) -> bool:
        """Remove a single subscription. Unknown topics are ignored."""
        if parse_topic(topic) is None:
            logger.warning("Ignoring unsubscribe from malformed topic %r", topic)
            return False
        async with self._lock:
            removed = self._remove_subscription(connection_id, topic)
        if removed:
            logger.debug("Connection %s unsubscribed from %s", connection_id, topic)
        return removed

    async def disconnect(self, connection_id: str) -> None:
        """Remove a connection and every subscription it holds."""
        async with self._lock:
            self._drop(connection_id)
        logger.debug("WebSocket %s disconnected", connection_id)

    async def publish(
        self,
        topic: str,
        event_type: str,
        data: Any,
        exclude: str | None = None,
    ) -> int:
        """
        Send an event to every connection subscribed to a topic.

        ``exclude`` skips one connection (the one that caused the event).
        A topic with no subscribers is a no-op. Returns the number of
        connections the event was written to.
        """
        async with self._lock:
            connections = [
                self._connections[cid]
                for cid in self._topics.get(topic, set())
                if cid != exclude and cid in self._connections
            ]

        if not connections:
            return 0

        payload = json.dumps({"type": event_type, "data": data}, default=str)
        delivered = 0
        closed = []

        for connection in connections:
            try:
                # Each socket gets its own budget; a stalled one is dropped
                with anyio.fail_after(self.send_timeout):
                    await connection.websocket.send_text(payload)
                delivered += 1
            except Exception:
                # Connection closed, errored or timed out
                closed.append(connection.id)

        # Clean up closed connections
        if closed:
            async with self._lock:
                for cid in closed:
                    self._drop(cid)
            logger.debug("Dropped %d dead connection(s) while publishing to %s", len(closed), topic)

        return delivered

    def get_subscriber_count(self, topic: str) -> int:
        """Get the number of connections subscribed to a topic."""
        return len(self._topics.get(topic, set()))

    def get_topics(self, connection_id: str) -> set[str]:
        """Get a copy of the topics a connection is subscribed to."""
        return set(self._subscriptions.get(connection_id, set()))

    def get_total_connections(self) -> int:
        """Get total number of active connections."""
        return len(self._connections)

    # -------------------------------------------------------------------------
    # Internal helpers (caller holds the lock)
    # -------------------------------------------------------------------------

    def _add_subscription(self, connection_id: str, topic: str) -> None:
        self._topics.setdefault(topic, set()).add(connection_id)
        self._subscriptions.setdefault(connection_id, set()).add(topic)

    def _remove_subscription(self, connection_id: str, topic: str) -> bool:
        subscribers = self._topics.get(topic)
        if not subscribers or connection_id not in subscribers:
            return False
        subscribers.discard(connection_id)
        if not subscribers:
            del self._topics[topic]
        self._subscriptions.get(connection_id, set()).discard(topic)
        return True

    def _drop(self, connection_id: str) -> None:
        for topic in self._subscriptions.pop(connection_id, set()):
            subscribers = self._topics.get(topic)
            if subscribers is None:
                continue
            subscribers.discard(connection_id)
            if not subscribers:
                del self._topics[topic]
        self._connections.pop(connection_id, None)


# Singleton instance
manager = ConnectionManager()


def get_connection_manager() -> ConnectionManager:
    """FastAPI dependency returning the process-wide manager."""
    return manager
