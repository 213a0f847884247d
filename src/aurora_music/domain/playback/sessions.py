"""Session-scoped ownership of playback engines.

Each browser session gets its own ``PlaybackQueueEngine``. Nothing is shared
between sessions and nothing outlives the process.
"""

import threading
from typing import Optional

from loguru import logger

from .engine import DEFAULT_VOLUME, PlaybackQueueEngine


class SessionRegistry:
    """Maps session ids to their playback engines."""

    def __init__(self, default_volume: float = DEFAULT_VOLUME):
        self.default_volume = default_volume
        self._engines: dict[str, PlaybackQueueEngine] = {}
        self._lock = threading.Lock()

    def get(self, session_id: str) -> PlaybackQueueEngine:
        """Return the engine for ``session_id``, creating it on first use."""
        with self._lock:
            engine = self._engines.get(session_id)
            if engine is None:
                engine = PlaybackQueueEngine(default_volume=self.default_volume)
                self._engines[session_id] = engine
                logger.info(f"Started playback session {session_id}")
            return engine

    def peek(self, session_id: str) -> Optional[PlaybackQueueEngine]:
        """Return the engine for ``session_id`` without creating one."""
        with self._lock:
            return self._engines.get(session_id)

    def discard(self, session_id: str) -> bool:
        """End a session, releasing its engine and observers.

        Returns:
            True if a session was removed
        """
        with self._lock:
            engine = self._engines.pop(session_id, None)
        if engine is None:
            return False
        engine.close()
        logger.info(f"Ended playback session {session_id}")
        return True

    def clear(self) -> None:
        with self._lock:
            engines = list(self._engines.values())
            self._engines.clear()
        for engine in engines:
            engine.close()

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._engines

    def __len__(self) -> int:
        with self._lock:
            return len(self._engines)
