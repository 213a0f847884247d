import asyncio
import time
from typing import Any

from fastapi import WebSocket
from loguru import logger

from aurora_music.domain.playback import SessionRegistry, Subscription

from .deps import session_registry
from .schemas import PlayerState


class SyncManager:
    """Pushes playback state to the WebSocket clients of each session.

    The first socket of a session subscribes to that session's engine; the
    last one to leave closes the subscription. Engine notifications can fire
    on any thread, so broadcasts are handed to the event loop that owns the
    session's sockets.
    """

    def __init__(self, registry: SessionRegistry):
        self.registry = registry
        self.connections: dict[str, list[WebSocket]] = {}
        self._subscriptions: dict[str, Subscription] = {}
        self._loops: dict[str, asyncio.AbstractEventLoop] = {}

    async def connect(self, session_id: str, ws: WebSocket) -> None:
        """Accept a socket and start following the session's engine."""
        await ws.accept()
        self.connections.setdefault(session_id, []).append(ws)
        self._loops[session_id] = asyncio.get_running_loop()

        engine = self.registry.get(session_id)
        subscription = self._subscriptions.get(session_id)
        if subscription is None or not subscription.active or subscription.engine is not engine:
            if subscription is not None:
                subscription.close()
            self._subscriptions[session_id] = engine.subscribe(
                lambda: self._on_engine_change(session_id)
            )

    def disconnect(self, session_id: str, ws: WebSocket) -> None:
        """Remove a socket; the session's subscription ends with its last socket."""
        sockets = self.connections.get(session_id, [])
        if ws in sockets:
            sockets.remove(ws)
        if not sockets:
            self._forget(session_id)

    def _forget(self, session_id: str) -> None:
        self.connections.pop(session_id, None)
        self._loops.pop(session_id, None)
        subscription = self._subscriptions.pop(session_id, None)
        if subscription is not None:
            subscription.close()

    def get_state(self, session_id: str) -> dict[str, Any]:
        """Current serialized state for a newly connected client."""
        snapshot = self.registry.get(session_id).get_snapshot()
        return PlayerState.from_snapshot(snapshot).model_dump(by_alias=True, mode="json")

    def _on_engine_change(self, session_id: str) -> None:
        # Errors here must not reach the engine's caller
        try:
            loop = self._loops.get(session_id)
            engine = self.registry.peek(session_id)
            if loop is None or loop.is_closed() or engine is None:
                return
            state = PlayerState.from_snapshot(engine.get_snapshot())
            data = state.model_dump(by_alias=True, mode="json")
            asyncio.run_coroutine_threadsafe(
                self.broadcast(session_id, "playback:state", data), loop
            )
        except Exception:
            logger.exception(f"Failed to schedule playback broadcast for session {session_id}")

    async def end_session(self, session_id: str) -> None:
        """Tell a session's clients it is gone and drop them."""
        sockets = list(self.connections.get(session_id, []))
        await self.broadcast(session_id, "session:ended", {})
        self._forget(session_id)
        for ws in sockets:
            try:
                await ws.close()
            except Exception:
                logger.debug(f"Socket for session {session_id} already closed")

    async def broadcast(self, session_id: str, event_type: str, data: dict) -> None:
        """Send a message to every client of one session."""
        message = {
            "type": event_type,
            "data": data,
            "ts": time.time(),
        }
        dead_connections: list[WebSocket] = []

        for conn in list(self.connections.get(session_id, [])):
            try:
                await conn.send_json(message)
            except Exception:
                dead_connections.append(conn)

        for conn in dead_connections:
            self.disconnect(session_id, conn)


# Singleton instance
sync_manager = SyncManager(session_registry)
