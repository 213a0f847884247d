"""Per-session playback queue and transport state machine.

One engine owns one listening session's queue, cursor, play/pause flag,
elapsed-time counter, and volume. Every operation is total: out-of-range
indices, duplicate enqueues, and transport calls on an empty queue are
no-ops rather than errors, so no input sequence can leave the state invalid.

Observers are notified (without payload) after each state-changing call and
read the new state through ``get_snapshot()``.
"""

import math
import threading
from dataclasses import dataclass, field
from typing import Callable, Optional

from loguru import logger

from ..library.models import Track

# Pressing "previous" later than this restarts the current track instead
RESTART_THRESHOLD_SECONDS = 3.0

DEFAULT_VOLUME = 0.7

Observer = Callable[[], None]


@dataclass(frozen=True)
class PlaybackSnapshot:
    """Immutable copy of a session's playback state."""

    queue: tuple[Track, ...] = ()
    cursor: Optional[int] = None
    is_playing: bool = False
    elapsed_seconds: float = 0.0
    volume: float = DEFAULT_VOLUME

    @property
    def current_track(self) -> Optional[Track]:
        if self.cursor is None:
            return None
        return self.queue[self.cursor]

    @property
    def is_idle(self) -> bool:
        return not self.queue and self.cursor is None and not self.is_playing


@dataclass
class _PlaybackState:
    queue: list[Track] = field(default_factory=list)
    cursor: Optional[int] = None
    is_playing: bool = False
    elapsed_seconds: float = 0.0
    volume: float = DEFAULT_VOLUME


class Subscription:
    """Handle returned by ``PlaybackQueueEngine.subscribe``.

    Closing it (directly or by leaving a ``with`` block) deregisters the
    observer. Closing twice is harmless.
    """

    def __init__(self, engine: "PlaybackQueueEngine", callback: Observer):
        self._engine = engine
        self._callback = callback
        self._active = True

    @property
    def engine(self) -> "PlaybackQueueEngine":
        return self._engine

    @property
    def active(self) -> bool:
        return self._active

    def close(self) -> None:
        if self._active:
            self._active = False
            self._engine._unsubscribe(self._callback)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def clamp_volume(volume: float, fallback: float = DEFAULT_VOLUME) -> float:
    """Clamp a volume to [0.0, 1.0]; NaN falls back to ``fallback``."""
    if math.isnan(volume):
        return fallback
    return min(max(float(volume), 0.0), 1.0)


class PlaybackQueueEngine:
    """Playback queue for a single listening session.

    All mutations run under one re-entrant lock covering the whole state, and
    observers are called after the lock is released.
    """

    def __init__(self, default_volume: float = DEFAULT_VOLUME):
        self._state = _PlaybackState(volume=clamp_volume(default_volume))
        self._lock = threading.RLock()
        self._observers: list[Observer] = []

    # Observers

    def subscribe(self, callback: Observer) -> Subscription:
        """Register a change observer; close the returned subscription to release it.

        Every observer is called even if an earlier one raises; the first
        error is then re-raised to the caller of the mutating operation.
        """
        with self._lock:
            self._observers.append(callback)
        return Subscription(self, callback)

    def _unsubscribe(self, callback: Observer) -> None:
        with self._lock:
            # Identity match so two equal callables can be released independently
            for i, existing in enumerate(self._observers):
                if existing is callback:
                    del self._observers[i]
                    break

    @property
    def observer_count(self) -> int:
        with self._lock:
            return len(self._observers)

    def close(self) -> None:
        """Drop all observers (called when the session ends)."""
        with self._lock:
            self._observers.clear()

    def _notify(self) -> None:
        """Call every observer, then re-raise the first error any of them raised."""
        with self._lock:
            observers = list(self._observers)
        first_error: Optional[Exception] = None
        for callback in observers:
            try:
                callback()
            except Exception as e:
                if first_error is None:
                    first_error = e
        if first_error is not None:
            raise first_error

    # Reads

    def get_snapshot(self) -> PlaybackSnapshot:
        with self._lock:
            s = self._state
            return PlaybackSnapshot(
                queue=tuple(s.queue),
                cursor=s.cursor,
                is_playing=s.is_playing,
                elapsed_seconds=s.elapsed_seconds,
                volume=s.volume,
            )

    def _index_of(self, track_id) -> Optional[int]:
        for i, queued in enumerate(self._state.queue):
            if queued.id == track_id:
                return i
        return None

    def _start_at(self, index: int) -> None:
        s = self._state
        s.cursor = index
        s.is_playing = True
        s.elapsed_seconds = 0.0

    # Queue mutation

    def enqueue(self, track: Track) -> bool:
        """Append a track unless one with the same id is already queued.

        Returns:
            True if the track was added, False for a duplicate (no notification)
        """
        with self._lock:
            if self._index_of(track.id) is not None:
                logger.debug(f"Skipping duplicate enqueue of track {track.id}")
                return False
            self._state.queue.append(track)
        self._notify()
        return True

    def play_now(self, track: Track) -> None:
        """Make ``track`` current and start it from the beginning.

        An already queued track is played where it sits; otherwise it is appended.
        """
        with self._lock:
            index = self._index_of(track.id)
            if index is None:
                self._state.queue.append(track)
                index = len(self._state.queue) - 1
            self._start_at(index)
            logger.debug(f"Playing track {track.id} at queue index {index}")
        self._notify()

    def remove_at(self, index: int) -> bool:
        """Remove the queue entry at ``index``, keeping the cursor on the same track.

        Removing the current track clears the current selection and stops playback.
        """
        with self._lock:
            s = self._state
            if not 0 <= index < len(s.queue):
                return False
            if s.cursor is not None:
                if index == s.cursor:
                    s.cursor = None
                    s.is_playing = False
                    s.elapsed_seconds = 0.0
                elif index < s.cursor:
                    s.cursor -= 1
            del s.queue[index]
        self._notify()
        return True

    def clear(self) -> None:
        """Empty the queue and return to the idle state."""
        with self._lock:
            s = self._state
            s.queue.clear()
            s.cursor = None
            s.is_playing = False
            s.elapsed_seconds = 0.0
        self._notify()

    # Transport

    def play_at(self, index: int) -> bool:
        with self._lock:
            if not 0 <= index < len(self._state.queue):
                return False
            self._start_at(index)
        self._notify()
        return True

    def toggle_play_pause(self) -> bool:
        with self._lock:
            s = self._state
            if s.cursor is None:
                return False
            s.is_playing = not s.is_playing
        self._notify()
        return True

    def advance_to_next(self) -> bool:
        """Move to the next track, or stop on the last one.

        At the end of the queue the cursor stays parked on the last track with
        playback stopped. Calling it again while parked changes nothing and
        returns False.
        """
        with self._lock:
            s = self._state
            if not s.queue:
                return False
            next_index = 0 if s.cursor is None else s.cursor + 1
            if next_index < len(s.queue):
                self._start_at(next_index)
            elif s.is_playing:
                s.is_playing = False
                logger.debug("Reached end of queue")
            else:
                # Already parked on the last track
                return False
        self._notify()
        return True

    def advance_to_previous(self) -> bool:
        """Restart the current track if it has played past the threshold, else go back one."""
        with self._lock:
            s = self._state
            if not s.queue:
                return False
            if s.elapsed_seconds > RESTART_THRESHOLD_SECONDS:
                s.elapsed_seconds = 0.0
            elif s.cursor is not None and s.cursor - 1 >= 0:
                self._start_at(s.cursor - 1)
            elif s.elapsed_seconds > 0.0:
                s.elapsed_seconds = 0.0
            else:
                return False
        self._notify()
        return True

    def advance_on_track_end(self) -> bool:
        """Handle the browser's end-of-track signal."""
        return self.advance_to_next()

    def set_elapsed(self, seconds: float) -> None:
        """Seek, or record a periodic tick from the client.

        Not clamped against the track duration, which is advisory.
        """
        with self._lock:
            if math.isnan(seconds):
                seconds = 0.0
            self._state.elapsed_seconds = max(0.0, float(seconds))
        self._notify()

    def set_volume(self, volume: float) -> None:
        with self._lock:
            self._state.volume = clamp_volume(volume, fallback=self._state.volume)
        self._notify()
