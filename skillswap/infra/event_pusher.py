"""
NotificationDispatcher implementations — push swap events to users.

Provides three implementations:
- WebSocketDispatcher: fans out via the connection registry (production)
- NullDispatcher: silently discards (headless / testing)
- LoggingDispatcher: logs events (debugging / CI)

None of them raise: delivery is best-effort and must not affect the
transition that triggered it.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

logger = logging.getLogger(__name__)


class NullDispatcher:
    """Dispatcher that silently discards all events."""

    async def dispatch(self, user_id: str, event_name: str, payload: dict[str, Any]) -> None:
        pass


class LoggingDispatcher:
    """Dispatcher that logs events at INFO level."""

    async def dispatch(self, user_id: str, event_name: str, payload: dict[str, Any]) -> None:
        logger.info(
            "Event [%s] %s: %s",
            user_id,
            event_name,
            {k: str(v)[:100] for k, v in payload.items()},
        )


class WebSocketDispatcher:
    """
    Dispatcher that sends events to every live connection of a user.

    Wire format: {"event": name, "data": payload, "timestamp": iso8601}
    """

    def __init__(self, ws_manager: Any):
        """
        Args:
            ws_manager: A WebSocketManager instance from websocket_manager.py
        """
        self._ws_manager = ws_manager

    @staticmethod
    def build_message(event_name: str, payload: dict[str, Any]) -> dict[str, Any]:
        return {
            "event": event_name,
            "data": payload,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    async def dispatch(self, user_id: str, event_name: str, payload: dict[str, Any]) -> None:
        message = self.build_message(event_name, payload)
        try:
            sent = await self._ws_manager.send_to_user(user_id, message)
        except Exception as e:
            logger.error("Dispatch %s to %s failed: %s", event_name, user_id, e)
            return
        logger.debug("Dispatched %s to %s (%d connections)", event_name, user_id, sent)
