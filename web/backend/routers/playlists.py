from typing import Any, Optional

from fastapi import APIRouter, Depends, Query

from aurora_music.domain.accounts import User
from aurora_music.domain.library.exceptions import PermissionDeniedError
from aurora_music.domain.playlists import (
    add_song_to_playlist,
    create_playlist,
    delete_playlist,
    get_available_songs,
    get_playlist,
    get_playlist_songs,
    get_public_playlists,
    get_user_playlists,
    move_song,
    remove_song_from_playlist,
    shuffle_playlist,
    update_playlist,
)

from ..deps import get_current_user, get_db, get_optional_user
from ..errors import domain_errors
from ..schemas import (
    PlaylistCreateRequest,
    PlaylistInfo,
    PlaylistMoveRequest,
    PlaylistUpdateRequest,
    SongIdRequest,
    TrackInfo,
)

router = APIRouter()


def _can_view(playlist: dict[str, Any], user: Optional[User]) -> bool:
    if playlist["is_public"]:
        return True
    return user is not None and (user.id == playlist["owner_id"] or user.is_admin)


def _require_view(playlist: dict[str, Any], user: Optional[User]) -> None:
    if not _can_view(playlist, user):
        raise PermissionDeniedError("This playlist is private.")


def _require_owner(playlist: dict[str, Any], user: User) -> None:
    if user.id != playlist["owner_id"] and not user.is_admin:
        raise PermissionDeniedError("Only the owner can change this playlist.")


@router.get("/playlists", response_model=list[PlaylistInfo])
async def list_playlists(
    owner_id: Optional[int] = Query(None, alias="ownerId"),
    user: Optional[User] = Depends(get_optional_user),
    db=Depends(get_db),
):
    """Public playlists, or one owner's playlists (private ones only for the owner)."""
    with domain_errors("list playlists"):
        if owner_id is None:
            playlists = get_public_playlists(db)
        else:
            playlists = [p for p in get_user_playlists(db, owner_id) if _can_view(p, user)]
    return [PlaylistInfo(**p) for p in playlists]


@router.post("/playlists", response_model=PlaylistInfo, status_code=201)
async def new_playlist(
    request: PlaylistCreateRequest,
    user: User = Depends(get_current_user),
    db=Depends(get_db),
):
    with domain_errors("create playlist"):
        return PlaylistInfo(**create_playlist(db, user.id, request.name, request.is_public))


@router.get("/playlists/{playlist_id}", response_model=PlaylistInfo)
async def playlist_detail(
    playlist_id: int,
    user: Optional[User] = Depends(get_optional_user),
    db=Depends(get_db),
):
    with domain_errors(f"load playlist {playlist_id}"):
        playlist = get_playlist(db, playlist_id)
        _require_view(playlist, user)
    return PlaylistInfo(**playlist)


@router.patch("/playlists/{playlist_id}", response_model=PlaylistInfo)
async def edit_playlist(
    playlist_id: int,
    request: PlaylistUpdateRequest,
    user: User = Depends(get_current_user),
    db=Depends(get_db),
):
    """Rename a playlist and/or change its visibility."""
    with domain_errors(f"update playlist {playlist_id}"):
        _require_owner(get_playlist(db, playlist_id), user)
        playlist = update_playlist(
            db, playlist_id, name=request.name, is_public=request.is_public
        )
    return PlaylistInfo(**playlist)


@router.delete("/playlists/{playlist_id}")
async def remove_playlist(
    playlist_id: int, user: User = Depends(get_current_user), db=Depends(get_db)
):
    with domain_errors(f"delete playlist {playlist_id}"):
        _require_owner(get_playlist(db, playlist_id), user)
        delete_playlist(db, playlist_id)
    return {"success": True}


@router.get("/playlists/{playlist_id}/songs", response_model=list[TrackInfo])
async def playlist_songs(
    playlist_id: int,
    user: Optional[User] = Depends(get_optional_user),
    db=Depends(get_db),
):
    """Songs in playlist order."""
    with domain_errors(f"load songs for playlist {playlist_id}"):
        _require_view(get_playlist(db, playlist_id), user)
        tracks = get_playlist_songs(db, playlist_id)
    return [TrackInfo.from_track(track) for track in tracks]


@router.post("/playlists/{playlist_id}/songs", status_code=201)
async def add_playlist_song(
    playlist_id: int,
    request: SongIdRequest,
    user: User = Depends(get_current_user),
    db=Depends(get_db),
):
    with domain_errors(f"add song to playlist {playlist_id}"):
        _require_owner(get_playlist(db, playlist_id), user)
        position = add_song_to_playlist(db, playlist_id, request.song_id)
    return {"success": True, "position": position}


@router.delete("/playlists/{playlist_id}/songs/{song_id}")
async def remove_playlist_song(
    playlist_id: int,
    song_id: int,
    user: User = Depends(get_current_user),
    db=Depends(get_db),
):
    with domain_errors(f"remove song from playlist {playlist_id}"):
        _require_owner(get_playlist(db, playlist_id), user)
        remove_song_from_playlist(db, playlist_id, song_id)
    return {"success": True}


@router.post("/playlists/{playlist_id}/move", response_model=list[TrackInfo])
async def reorder_playlist_song(
    playlist_id: int,
    request: PlaylistMoveRequest,
    user: User = Depends(get_current_user),
    db=Depends(get_db),
):
    """Move the song at one position to another, returning the new order."""
    with domain_errors(f"reorder playlist {playlist_id}"):
        _require_owner(get_playlist(db, playlist_id), user)
        move_song(db, playlist_id, request.from_position, request.to_position)
        tracks = get_playlist_songs(db, playlist_id)
    return [TrackInfo.from_track(track) for track in tracks]


@router.post("/playlists/{playlist_id}/shuffle", response_model=list[TrackInfo])
async def shuffle_playlist_songs(
    playlist_id: int, user: User = Depends(get_current_user), db=Depends(get_db)
):
    """Randomly reorder the playlist, returning the new order."""
    with domain_errors(f"shuffle playlist {playlist_id}"):
        _require_owner(get_playlist(db, playlist_id), user)
        tracks = shuffle_playlist(db, playlist_id)
    return [TrackInfo.from_track(track) for track in tracks]


@router.get("/playlists/{playlist_id}/available-songs", response_model=list[TrackInfo])
async def available_playlist_songs(
    playlist_id: int, user: User = Depends(get_current_user), db=Depends(get_db)
):
    """Catalog songs not yet in the playlist, for the owner's add-song picker."""
    with domain_errors(f"list available songs for playlist {playlist_id}"):
        _require_owner(get_playlist(db, playlist_id), user)
        tracks = get_available_songs(db, playlist_id)
    return [TrackInfo.from_track(track) for track in tracks]
