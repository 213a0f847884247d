"""Playback domain - per-session queue and transport state.

This domain handles:
- The playback queue state machine (enqueue, play now, next/previous, seek, volume)
- Change notification through scoped subscriptions
- One engine per listening session
"""

from .engine import (
    DEFAULT_VOLUME,
    RESTART_THRESHOLD_SECONDS,
    PlaybackQueueEngine,
    PlaybackSnapshot,
    Subscription,
    clamp_volume,
)
from .sessions import SessionRegistry

__all__ = [
    "DEFAULT_VOLUME",
    "RESTART_THRESHOLD_SECONDS",
    "PlaybackQueueEngine",
    "PlaybackSnapshot",
    "Subscription",
    "clamp_volume",
    "SessionRegistry",
]
