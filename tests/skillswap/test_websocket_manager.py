"""Tests for the WebSocketManager connection registry."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from websocket_manager import WebSocketManager

from tests.skillswap.conftest import FakeConnection


@pytest.fixture
def manager() -> WebSocketManager:
    return WebSocketManager(send_timeout_s=0.05)


class TestRegister:
    @pytest.mark.asyncio
    async def test_register_and_lookup(self, manager):
        conn = FakeConnection()
        conn_id = await manager.register("user_a", conn)

        found = await manager.connections_for("user_a")
        assert [c.connection_id for c in found] == [conn_id]
        assert found[0].connection is conn
        assert manager.is_connected("user_a")

    @pytest.mark.asyncio
    async def test_multiple_devices(self, manager):
        id1 = await manager.register("user_a", FakeConnection())
        id2 = await manager.register("user_a", FakeConnection())

        assert id1 != id2
        assert manager.get_user_connection_count("user_a") == 2
        assert manager.get_connection_count() == 2

    @pytest.mark.asyncio
    async def test_same_connection_registers_once(self, manager):
        conn = FakeConnection()
        id1 = await manager.register("user_bob", conn)
        id2 = await manager.register("user_bob", conn)

        sent = await manager.send_to_user("user_bob", {"event": "swapAccepted"})

        assert id1 == id2
        assert manager.get_user_connection_count("user_bob") == 1
        assert sent == 1
        assert conn.sent == [{"event": "swapAccepted"}]

    @pytest.mark.asyncio
    async def test_reregister_after_disconnect_gets_new_id(self, manager):
        conn = FakeConnection()
        id1 = await manager.register("user_bob", conn)
        await manager.disconnect("user_bob", id1)

        id2 = await manager.register("user_bob", conn)

        assert id2 != id1
        assert manager.get_user_connection_count("user_bob") == 1

    @pytest.mark.asyncio
    async def test_unknown_user_has_no_connections(self, manager):
        assert await manager.connections_for("nobody") == []
        assert not manager.is_connected("nobody")


class TestDisconnect:
    @pytest.mark.asyncio
    async def test_single_connection(self, manager):
        id1 = await manager.register("user_a", FakeConnection())
        await manager.register("user_a", FakeConnection())

        assert await manager.disconnect("user_a", id1) == 1
        assert manager.get_user_connection_count("user_a") == 1

    @pytest.mark.asyncio
    async def test_all_connections(self, manager):
        await manager.register("user_a", FakeConnection())
        await manager.register("user_a", FakeConnection())

        assert await manager.disconnect("user_a") == 2
        assert not manager.is_connected("user_a")
        assert manager.get_connection_count() == 0

    @pytest.mark.asyncio
    async def test_idempotent(self, manager):
        conn_id = await manager.register("user_a", FakeConnection())
        await manager.disconnect("user_a", conn_id)

        assert await manager.disconnect("user_a", conn_id) == 0
        assert await manager.disconnect("user_a") == 0

    @pytest.mark.asyncio
    async def test_cannot_remove_someone_elses_connection(self, manager):
        conn_id = await manager.register("user_a", FakeConnection())
        assert await manager.disconnect("user_b", conn_id) == 0
        assert manager.is_connected("user_a")

    @pytest.mark.asyncio
    async def test_concurrent_connect_disconnect(self, manager):
        ids = await asyncio.gather(*[
            manager.register("user_a", FakeConnection()) for _ in range(20)
        ])
        await asyncio.gather(*[manager.disconnect("user_a", i) for i in ids[:10]])

        assert manager.get_user_connection_count("user_a") == 10
        assert len(set(ids)) == 20


class TestSendToUser:
    @pytest.mark.asyncio
    async def test_fans_out_to_all_devices(self, manager):
        phone, laptop = FakeConnection(), FakeConnection()
        await manager.register("user_a", phone)
        await manager.register("user_a", laptop)

        sent = await manager.send_to_user("user_a", {"event": "swapAccepted"})

        assert sent == 2
        assert phone.sent == [{"event": "swapAccepted"}]
        assert laptop.sent == [{"event": "swapAccepted"}]

    @pytest.mark.asyncio
    async def test_only_target_user(self, manager):
        other = FakeConnection()
        await manager.register("user_b", other)

        assert await manager.send_to_user("user_a", {"event": "x"}) == 0
        assert other.sent == []

    @pytest.mark.asyncio
    async def test_failed_connection_is_dropped(self, manager):
        good, bad = FakeConnection(), FakeConnection(fail=True)
        await manager.register("user_a", good)
        await manager.register("user_a", bad)

        sent = await manager.send_to_user("user_a", {"event": "x"})

        assert sent == 1
        assert manager.get_user_connection_count("user_a") == 1

    @pytest.mark.asyncio
    async def test_slow_connection_times_out(self, manager):
        slow = FakeConnection(delay=1.0)
        await manager.register("user_a", slow)

        sent = await manager.send_to_user("user_a", {"event": "x"})

        assert sent == 0
        assert slow.sent == []
        assert not manager.is_connected("user_a")


class TestConnect:
    @pytest.mark.asyncio
    async def test_accepts_and_registers(self, manager):
        websocket = MagicMock()
        websocket.accept = AsyncMock()

        conn_id = await manager.connect(websocket, "user_a")

        websocket.accept.assert_awaited_once()
        assert conn_id is not None
        assert websocket.state.connection_id == conn_id
        assert manager.is_connected("user_a")

    @pytest.mark.asyncio
    async def test_failed_handshake(self, manager):
        websocket = MagicMock()
        websocket.accept = AsyncMock(side_effect=RuntimeError("handshake"))

        assert await manager.connect(websocket, "user_a") is None
        assert not manager.is_connected("user_a")


class TestStats:
    @pytest.mark.asyncio
    async def test_stats(self, manager):
        await manager.register("user_a", FakeConnection())
        await manager.register("user_a", FakeConnection())
        await manager.register("user_b", FakeConnection())

        stats = manager.get_stats()
        assert stats["total_connections"] == 3
        assert stats["total_users"] == 2
        assert stats["users"] == {"user_a": 2, "user_b": 1}
