"""Player router: per-session queue and transport control.

Every endpoint returns the session's state after the call. Transport calls
that don't apply (next on an empty queue, an out-of-range index) are no-ops
and still return the current state.
"""

from fastapi import APIRouter, Depends
from loguru import logger

from aurora_music.domain.library.songs import get_song, increment_play_count
from aurora_music.domain.playback import PlaybackQueueEngine, PlaybackSnapshot, clamp_volume

from ..deps import get_db, get_player, get_session_id, session_registry
from ..errors import domain_errors
from ..schemas import PlayerState, SeekRequest, SongIdRequest, VolumeRequest
from ..sync_manager import sync_manager

router = APIRouter()


def get_playback_state(engine: PlaybackQueueEngine) -> PlayerState:
    return PlayerState.from_snapshot(engine.get_snapshot())


@router.get("/player/state", response_model=PlayerState)
async def get_state(engine: PlaybackQueueEngine = Depends(get_player)):
    return get_playback_state(engine)


@router.post("/player/enqueue", response_model=PlayerState)
async def enqueue(
    request: SongIdRequest,
    engine: PlaybackQueueEngine = Depends(get_player),
    db=Depends(get_db),
):
    """Add a song to the end of the queue (duplicates are ignored)."""
    with domain_errors("enqueue song"):
        track = get_song(db, request.song_id)
    engine.enqueue(track)
    return get_playback_state(engine)


@router.post("/player/play-now", response_model=PlayerState)
async def play_now(
    request: SongIdRequest,
    engine: PlaybackQueueEngine = Depends(get_player),
    db=Depends(get_db),
):
    """Start a song immediately, queueing it if needed."""
    with domain_errors("play song"):
        track = get_song(db, request.song_id)
        engine.play_now(track)
        increment_play_count(db, track.id)
    logger.info(f"Play now: song {track.id} ({track.title!r})")
    return get_playback_state(engine)


@router.post("/player/queue/{index}/play", response_model=PlayerState)
async def play_queue_entry(
    index: int,
    engine: PlaybackQueueEngine = Depends(get_player),
    db=Depends(get_db),
):
    if engine.play_at(index):
        track = engine.get_snapshot().current_track
        if track is not None:
            with domain_errors("record play"):
                increment_play_count(db, track.id)
    return get_playback_state(engine)


@router.delete("/player/queue/{index}", response_model=PlayerState)
async def remove_queue_entry(index: int, engine: PlaybackQueueEngine = Depends(get_player)):
    engine.remove_at(index)
    return get_playback_state(engine)


@router.delete("/player/queue", response_model=PlayerState)
async def clear_queue(engine: PlaybackQueueEngine = Depends(get_player)):
    engine.clear()
    return get_playback_state(engine)


@router.post("/player/toggle", response_model=PlayerState)
async def toggle(engine: PlaybackQueueEngine = Depends(get_player)):
    engine.toggle_play_pause()
    return get_playback_state(engine)


@router.post("/player/next", response_model=PlayerState)
async def next_track(engine: PlaybackQueueEngine = Depends(get_player)):
    engine.advance_to_next()
    return get_playback_state(engine)


@router.post("/player/previous", response_model=PlayerState)
async def previous_track(engine: PlaybackQueueEngine = Depends(get_player)):
    engine.advance_to_previous()
    return get_playback_state(engine)


@router.post("/player/ended", response_model=PlayerState)
async def track_ended(engine: PlaybackQueueEngine = Depends(get_player)):
    """Called by the browser's audio element when the current track finishes."""
    engine.advance_on_track_end()
    return get_playback_state(engine)


@router.post("/player/seek", response_model=PlayerState)
async def seek(request: SeekRequest, engine: PlaybackQueueEngine = Depends(get_player)):
    engine.set_elapsed(request.seconds)
    return get_playback_state(engine)


@router.post("/player/volume", response_model=PlayerState)
async def set_volume(request: VolumeRequest, engine: PlaybackQueueEngine = Depends(get_player)):
    engine.set_volume(request.volume)
    return get_playback_state(engine)


@router.delete("/player/session", response_model=PlayerState)
async def end_session(session_id: str = Depends(get_session_id)):
    """Forget the session's queue and disconnect its live clients."""
    await sync_manager.end_session(session_id)
    session_registry.discard(session_id)
    return PlayerState.from_snapshot(
        PlaybackSnapshot(volume=clamp_volume(session_registry.default_volume))
    )
