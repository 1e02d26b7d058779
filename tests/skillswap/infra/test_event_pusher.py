"""Tests for the NotificationDispatcher implementations."""

from __future__ import annotations

import logging
from unittest.mock import AsyncMock

import pytest

from skillswap.core.protocols import NotificationDispatcher
from skillswap.infra.event_pusher import (
    LoggingDispatcher,
    NullDispatcher,
    WebSocketDispatcher,
)


@pytest.fixture
def mock_ws_manager():
    manager = AsyncMock()
    manager.send_to_user = AsyncMock(return_value=2)
    return manager


@pytest.fixture
def ws_dispatcher(mock_ws_manager):
    return WebSocketDispatcher(mock_ws_manager)


class TestProtocolConformance:
    @pytest.mark.parametrize("cls", [NullDispatcher, LoggingDispatcher])
    def test_simple_dispatchers(self, cls):
        assert isinstance(cls(), NotificationDispatcher)

    def test_websocket_dispatcher(self, ws_dispatcher):
        assert isinstance(ws_dispatcher, NotificationDispatcher)


class TestWebSocketDispatcher:
    @pytest.mark.asyncio
    async def test_sends_to_recipient(self, ws_dispatcher, mock_ws_manager):
        await ws_dispatcher.dispatch("user_bob", "swapAccepted", {"swapId": "swap_1"})

        mock_ws_manager.send_to_user.assert_awaited_once()
        call_args = mock_ws_manager.send_to_user.call_args
        assert call_args[0][0] == "user_bob"

    @pytest.mark.asyncio
    async def test_message_shape(self, ws_dispatcher, mock_ws_manager):
        await ws_dispatcher.dispatch("user_bob", "newSwapRequest", {"swapId": "swap_2"})

        message = mock_ws_manager.send_to_user.call_args[0][1]
        assert message["event"] == "newSwapRequest"
        assert message["data"] == {"swapId": "swap_2"}
        assert "timestamp" in message

    @pytest.mark.asyncio
    async def test_manager_failure_is_swallowed(self, mock_ws_manager, caplog):
        mock_ws_manager.send_to_user = AsyncMock(side_effect=RuntimeError("boom"))
        dispatcher = WebSocketDispatcher(mock_ws_manager)

        with caplog.at_level(logging.ERROR):
            await dispatcher.dispatch("user_bob", "swapRejected", {"swapId": "swap_3"})

        assert "swapRejected" in caplog.text


class TestLoggingDispatcher:
    @pytest.mark.asyncio
    async def test_logs_event(self, caplog):
        with caplog.at_level(logging.INFO):
            await LoggingDispatcher().dispatch("user_a", "swapCancelled", {"swapId": "swap_4"})
        assert "swapCancelled" in caplog.text
        assert "user_a" in caplog.text


class TestNullDispatcher:
    @pytest.mark.asyncio
    async def test_discards(self):
        assert await NullDispatcher().dispatch("user_a", "swapAccepted", {}) is None
