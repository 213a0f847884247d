import asyncio
from unittest.mock import AsyncMock

import pytest

from aurora_music.domain.library.models import Track
from aurora_music.domain.playback import SessionRegistry
from web.backend.sync_manager import SyncManager


@pytest.fixture
def registry():
    return SessionRegistry()


@pytest.mark.anyio
async def test_connect_accepts_and_subscribes(registry):
    manager = SyncManager(registry)
    ws = AsyncMock()
    await manager.connect("s1", ws)
    ws.accept.assert_called_once()
    assert ws in manager.connections["s1"]
    assert registry.get("s1").observer_count == 1


@pytest.mark.anyio
async def test_second_socket_shares_subscription(registry):
    manager = SyncManager(registry)
    await manager.connect("s1", AsyncMock())
    await manager.connect("s1", AsyncMock())
    assert registry.get("s1").observer_count == 1


@pytest.mark.anyio
async def test_last_disconnect_releases_subscription(registry):
    manager = SyncManager(registry)
    ws1 = AsyncMock()
    ws2 = AsyncMock()
    await manager.connect("s1", ws1)
    await manager.connect("s1", ws2)

    manager.disconnect("s1", ws1)
    assert registry.get("s1").observer_count == 1

    manager.disconnect("s1", ws2)
    assert registry.get("s1").observer_count == 0
    assert "s1" not in manager.connections


@pytest.mark.anyio
async def test_engine_change_is_broadcast_to_session_only(registry):
    manager = SyncManager(registry)
    mine = AsyncMock()
    theirs = AsyncMock()
    await manager.connect("s1", mine)
    await manager.connect("s2", theirs)

    registry.get("s1").enqueue(Track(id=7, title="Seven"))
    await asyncio.sleep(0.05)

    mine.send_json.assert_called_once()
    message = mine.send_json.call_args[0][0]
    assert message["type"] == "playback:state"
    assert message["data"]["queue"][0]["title"] == "Seven"
    assert "ts" in message
    theirs.send_json.assert_not_called()


@pytest.mark.anyio
async def test_broadcast_removes_dead_connections(registry):
    manager = SyncManager(registry)
    ws_alive = AsyncMock()
    ws_dead = AsyncMock()
    ws_dead.send_json.side_effect = Exception("Connection closed")
    await manager.connect("s1", ws_alive)
    await manager.connect("s1", ws_dead)
    await manager.broadcast("s1", "test:event", {})
    assert ws_alive in manager.connections["s1"]
    assert ws_dead not in manager.connections["s1"]


@pytest.mark.anyio
async def test_end_session_notifies_and_closes(registry):
    manager = SyncManager(registry)
    ws = AsyncMock()
    await manager.connect("s1", ws)

    await manager.end_session("s1")

    assert ws.send_json.call_args[0][0]["type"] == "session:ended"
    ws.close.assert_called_once()
    assert "s1" not in manager.connections


@pytest.mark.anyio
async def test_reconnect_after_engine_replaced(registry):
    manager = SyncManager(registry)
    ws = AsyncMock()
    await manager.connect("s1", ws)
    registry.discard("s1")

    await manager.connect("s1", AsyncMock())

    assert registry.get("s1").observer_count == 1
