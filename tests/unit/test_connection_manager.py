"""Tests for the WebSocket ConnectionManager (per-user channels, tenant pinning)."""

from unittest.mock import AsyncMock

from auditflow.api.websocket.manager import ConnectionManager, user_channel


def _socket() -> AsyncMock:
    return AsyncMock()


async def test_connect_accepts_and_counts() -> None:
    manager = ConnectionManager()
    ws = _socket()

    await manager.connect(ws, "u1", "t1")

    ws.accept.assert_awaited_once()
    assert await manager.get_connection_count() == 1
    assert user_channel("u1") == "user:u1"


async def test_emit_reaches_every_connection_of_user() -> None:
    manager = ConnectionManager()
    tab1, tab2, other = _socket(), _socket(), _socket()
    await manager.connect(tab1, "u1", "t1")
    await manager.connect(tab2, "u1", "t1")
    await manager.connect(other, "u2", "t1")

    reached = await manager.emit_to_channel("u1", "notificationCreated", {"id": "n1"})

    assert reached == 2
    message = {"event": "notificationCreated", "data": {"id": "n1"}}
    tab1.send_json.assert_awaited_once_with(message)
    tab2.send_json.assert_awaited_once_with(message)
    other.send_json.assert_not_awaited()


async def test_emit_pinned_to_tenant_skips_other_tenant_sockets() -> None:
    manager = ConnectionManager()
    own, foreign = _socket(), _socket()
    await manager.connect(own, "u1", "t1")
    await manager.connect(foreign, "u1", "t2")

    reached = await manager.emit_to_channel("u1", "notificationCreated", {}, tenant_id="t1")

    assert reached == 1
    foreign.send_json.assert_not_awaited()


async def test_offline_user_reaches_nobody() -> None:
    assert await ConnectionManager().emit_to_channel("ghost", "notificationCreated", {}) == 0


async def test_dead_socket_is_dropped() -> None:
    manager = ConnectionManager()
    dead = _socket()
    dead.send_json.side_effect = RuntimeError("closed")
    await manager.connect(dead, "u1", "t1")

    assert await manager.emit_to_channel("u1", "notificationCreated", {}) == 0
    assert await manager.get_connection_count() == 0


async def test_disconnect_removes_connection() -> None:
    manager = ConnectionManager()
    ws = _socket()
    await manager.connect(ws, "u1", "t1")

    await manager.disconnect(ws)
    await manager.disconnect(ws)

    assert await manager.get_connection_count() == 0
