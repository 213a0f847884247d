from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile
from loguru import logger

from aurora_music.core.config import Config
from aurora_music.domain.accounts import User
from aurora_music.domain.library.exceptions import PermissionDeniedError
from aurora_music.domain.library.songs import (
    delete_song,
    get_all_songs,
    get_new_songs,
    get_popular_songs,
    get_song,
    get_song_audio,
    get_songs_by_owner,
    search_songs,
    set_song_genres,
)
from aurora_music.domain.library.upload import upload_song
from aurora_music.domain.rating import (
    get_rating_stats_for_songs,
    get_song_ratings,
    get_top_rated_songs,
    save_rating,
)

from ..deps import get_config, get_current_admin, get_current_user, get_db
from ..errors import domain_errors
from ..schemas import (
    RatedTrackInfo,
    RatingEntry,
    RatingRequest,
    SongGenresRequest,
    SongRatingsResponse,
    TrackInfo,
)

router = APIRouter()

HOME_LIST_LIMIT = 10


@router.get("/songs", response_model=list[TrackInfo])
async def list_songs(
    q: Optional[str] = None,
    owner_id: Optional[int] = Query(None, alias="ownerId"),
    db=Depends(get_db),
):
    """All songs, or a title search, or one user's uploads."""
    with domain_errors("list songs"):
        if owner_id is not None:
            tracks = get_songs_by_owner(db, owner_id)
        elif q:
            tracks = search_songs(db, q)
        else:
            tracks = get_all_songs(db)
    return [TrackInfo.from_track(track) for track in tracks]


@router.get("/songs/popular", response_model=list[TrackInfo])
async def popular_songs(db=Depends(get_db)):
    with domain_errors("list popular songs"):
        tracks = get_popular_songs(db, HOME_LIST_LIMIT)
    return [TrackInfo.from_track(track) for track in tracks]


@router.get("/songs/new", response_model=list[TrackInfo])
async def new_songs(db=Depends(get_db)):
    with domain_errors("list new songs"):
        tracks = get_new_songs(db, HOME_LIST_LIMIT)
    return [TrackInfo.from_track(track) for track in tracks]


@router.get("/songs/top-rated", response_model=list[RatedTrackInfo])
async def top_rated_songs(db=Depends(get_db)):
    with domain_errors("list top rated songs"):
        rated = get_top_rated_songs(db, HOME_LIST_LIMIT)
    return [RatedTrackInfo.from_rated(entry) for entry in rated]


@router.post("/songs", response_model=TrackInfo, status_code=201)
async def upload(
    title: Optional[str] = Form(None),
    genre_ids: Optional[list[int]] = Form(None, alias="genreIds"),
    file: Optional[UploadFile] = File(None),
    user: User = Depends(get_current_user),
    config: Config = Depends(get_config),
    db=Depends(get_db),
):
    """Upload an MP3 as the acting user (multipart form)."""
    data = await file.read() if file is not None else None
    content_type = file.content_type if file is not None else None

    with domain_errors("upload song"):
        track = upload_song(
            db,
            owner_id=user.id,
            title=title,
            genre_ids=genre_ids or [],
            content_type=content_type,
            data=data,
            config=config.upload,
        )
    return TrackInfo.from_track(track)


@router.get("/songs/{song_id}", response_model=TrackInfo)
async def song_detail(song_id: int, db=Depends(get_db)):
    with domain_errors(f"load song {song_id}"):
        return TrackInfo.from_track(get_song(db, song_id))


@router.get("/songs/{song_id}/audio")
async def stream_audio(song_id: int, db=Depends(get_db)):
    with domain_errors(f"load audio for song {song_id}"):
        audio = get_song_audio(db, song_id)
    logger.debug(f"Streaming song {song_id} ({len(audio)} bytes)")
    return Response(content=audio, media_type="audio/mpeg")


@router.delete("/songs/{song_id}")
async def remove_song(
    song_id: int, admin: User = Depends(get_current_admin), db=Depends(get_db)
):
    """Delete a song (admin only)."""
    with domain_errors(f"delete song {song_id}"):
        delete_song(db, song_id)
    logger.info(f"Admin {admin.id} deleted song {song_id}")
    return {"success": True}


@router.put("/songs/{song_id}/genres", response_model=TrackInfo)
async def update_song_genres(
    song_id: int,
    request: SongGenresRequest,
    user: User = Depends(get_current_user),
    db=Depends(get_db),
):
    """Replace a song's genres (uploader or admin)."""
    with domain_errors(f"update genres for song {song_id}"):
        track = get_song(db, song_id)
        if track.owner_id != user.id and not user.is_admin:
            raise PermissionDeniedError("Only the uploader can change this song's genres.")
        track = set_song_genres(db, song_id, request.genre_ids)
    return TrackInfo.from_track(track)


def _ratings_response(db, song_id: int) -> SongRatingsResponse:
    average, count = get_rating_stats_for_songs(db, [song_id]).get(song_id, (None, 0))
    return SongRatingsResponse(
        song_id=song_id,
        average_rating=round(average, 2) if average is not None else None,
        rating_count=count,
        ratings=[RatingEntry(**row) for row in get_song_ratings(db, song_id)],
    )


@router.get("/songs/{song_id}/ratings", response_model=SongRatingsResponse)
async def song_ratings(song_id: int, db=Depends(get_db)):
    with domain_errors(f"load ratings for song {song_id}"):
        get_song(db, song_id)
        return _ratings_response(db, song_id)


@router.post("/songs/{song_id}/ratings", response_model=SongRatingsResponse)
async def rate_song(
    song_id: int,
    request: RatingRequest,
    user: User = Depends(get_current_user),
    db=Depends(get_db),
):
    """Rate a song 1-5; rating again replaces the earlier rating."""
    with domain_errors(f"rate song {song_id}"):
        save_rating(db, user.id, song_id, request.rating)
        return _ratings_response(db, song_id)
