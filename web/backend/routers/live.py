import json
import time
from typing import Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status
from loguru import logger

from ..deps import SESSION_COOKIE, session_registry
from ..sync_manager import sync_manager

router = APIRouter()


def _handle_client_message(session_id: str, data: dict) -> None:
    """Apply a message sent by the browser's audio element."""
    engine = session_registry.get(session_id)
    msg_type = data.get("type")

    if msg_type == "playback:tick":
        # Periodic elapsed-time report while audio plays
        try:
            engine.set_elapsed(float(data.get("elapsedSeconds", 0)))
        except (TypeError, ValueError):
            logger.warning(f"Invalid tick from session {session_id}: {data}")
    elif msg_type == "playback:ended":
        engine.advance_on_track_end()
    else:
        logger.debug(f"Ignoring WebSocket message type {msg_type!r}")


@router.websocket("/ws/player")
async def player_websocket(websocket: WebSocket, session: Optional[str] = None):
    """WebSocket endpoint streaming one session's playback state."""
    session_id = session or websocket.cookies.get(SESSION_COOKIE)
    if not session_id:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await sync_manager.connect(session_id, websocket)
    logger.info(f"Player socket connected for session {session_id}")

    try:
        # Send current state immediately so reconnecting clients resync
        await websocket.send_json({
            "type": "playback:state",
            "data": sync_manager.get_state(session_id),
            "ts": time.time(),
        })

        while True:
            message = await websocket.receive_text()
            try:
                data = json.loads(message)
            except json.JSONDecodeError:
                logger.warning(f"Invalid JSON from WebSocket: {message}")
                continue
            if isinstance(data, dict):
                _handle_client_message(session_id, data)

    except WebSocketDisconnect:
        logger.info(f"Player socket disconnected for session {session_id}")
    except Exception:
        logger.exception(f"Player socket failed for session {session_id}")
        raise
    finally:
        sync_manager.disconnect(session_id, websocket)
