"""
WebSocket Manager - live connection registry for swap notifications

Maps each user to the connections they currently hold:
1. Registration / deregistration (a user may hold several connections)
2. Fan-out of one message to all of a user's connections
3. Cleanup of connections whose send fails

Any object with ``async send_json(message)`` can be registered, so the
registry is testable without a real transport.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Set, Tuple

from fastapi import WebSocket

logger = logging.getLogger(__name__)


@dataclass
class ConnectionInfo:
    """A registered live connection."""
    connection: Any
    user_id: str
    connection_id: str
    connected_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class WebSocketManager:
    """
    Connection registry.

    Insert, remove and lookup-by-user are guarded by one asyncio.Lock.
    Sends happen outside the lock on a snapshot, so a slow socket never
    holds up connect/disconnect of other devices.
    """

    def __init__(self, send_timeout_s: float = 5.0):
        # connection_id -> ConnectionInfo
        self._connections: Dict[str, ConnectionInfo] = {}
        # user_id -> Set[connection_id]
        self._user_connections: Dict[str, Set[str]] = {}
        # (user_id, id(connection)) -> connection_id
        self._registered: Dict[Tuple[str, int], str] = {}
        self._lock = asyncio.Lock()
        self._connection_counter = 0
        self._send_timeout_s = send_timeout_s

    def _generate_connection_id(self, user_id: str) -> str:
        self._connection_counter += 1
        return f"{user_id}_{self._connection_counter}"

    async def connect(self, websocket: WebSocket, user_id: str) -> Optional[str]:
        """
        Accept a WebSocket and register it for ``user_id``.

        Returns:
            The connection id, or None if the handshake failed.
        """
        try:
            await websocket.accept()
        except Exception as e:
            logger.error("WebSocket accept failed for %s: %s", user_id, e)
            return None

        connection_id = await self.register(user_id, websocket)
        websocket.state.connection_id = connection_id
        return connection_id

    async def register(self, user_id: str, connection: Any) -> str:
        """
        Register a connection under ``user_id``. Returns its connection id.

        Registering the same connection again for the same user is a
        no-op that returns the existing id.
        """
        key = (user_id, id(connection))
        async with self._lock:
            existing = self._registered.get(key)
            if existing is not None:
                return existing
            connection_id = self._generate_connection_id(user_id)
            self._registered[key] = connection_id
            self._connections[connection_id] = ConnectionInfo(
                connection=connection,
                user_id=user_id,
                connection_id=connection_id,
            )
            self._user_connections.setdefault(user_id, set()).add(connection_id)

        logger.info("Connection registered: %s (conn_id: %s)", user_id, connection_id)
        return connection_id

    async def disconnect(self, user_id: str, connection_id: Optional[str] = None) -> int:
        """
        Deregister one connection, or all of the user's connections if
        ``connection_id`` is omitted. Safe to call repeatedly.

        Returns:
            Number of connections removed.
        """
        async with self._lock:
            if connection_id is not None:
                conn = self._connections.get(connection_id)
                if conn is None or conn.user_id != user_id:
                    return 0
                conn_ids = [connection_id]
            else:
                conn_ids = list(self._user_connections.get(user_id, ()))

            for conn_id in conn_ids:
                conn = self._connections.pop(conn_id, None)
                if conn is not None:
                    self._registered.pop((user_id, id(conn.connection)), None)
                owned = self._user_connections.get(user_id)
                if owned is not None:
                    owned.discard(conn_id)
                    if not owned:
                        del self._user_connections[user_id]

        if conn_ids:
            logger.info("Connection removed: %s (%d)", user_id, len(conn_ids))
        return len(conn_ids)

    async def connections_for(self, user_id: str) -> List[ConnectionInfo]:
        async with self._lock:
            return [
                self._connections[c]
                for c in self._user_connections.get(user_id, ())
                if c in self._connections
            ]

    async def _send_to_connection(self, conn: ConnectionInfo, message: Dict[str, Any]) -> bool:
        try:
            await asyncio.wait_for(
                conn.connection.send_json(message), timeout=self._send_timeout_s,
            )
            return True
        except asyncio.TimeoutError:
            logger.warning(
                "Send to connection %s timed out after %.1fs",
                conn.connection_id, self._send_timeout_s,
            )
            return False
        except Exception as e:
            logger.error("Send to connection %s failed: %s", conn.connection_id, e)
            return False

    async def send_to_user(self, user_id: str, message: Dict[str, Any]) -> int:
        """
        Send a message to every connection of ``user_id``.

        Connections that fail are deregistered.

        Returns:
            Number of connections that received the message.
        """
        targets = await self.connections_for(user_id)
        if not targets:
            return 0

        success_count = 0
        failed_connections = []

        for conn in targets:
            if await self._send_to_connection(conn, message):
                success_count += 1
            else:
                failed_connections.append(conn.connection_id)

        for conn_id in failed_connections:
            await self.disconnect(user_id, conn_id)

        return success_count

    def get_connection_count(self) -> int:
        return len(self._connections)

    def get_user_connection_count(self, user_id: str) -> int:
        return len(self._user_connections.get(user_id, set()))

    def is_connected(self, user_id: str) -> bool:
        return bool(self._user_connections.get(user_id))

    def get_stats(self) -> Dict[str, Any]:
        return {
            "total_connections": len(self._connections),
            "total_users": len(self._user_connections),
            "users": {
                user_id: len(conn_ids)
                for user_id, conn_ids in self._user_connections.items()
            },
        }
