"""Playlists domain - user playlists with ordered songs."""

from .crud import (
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
    song_in_playlist,
    update_playlist,
)

__all__ = [
    "add_song_to_playlist",
    "create_playlist",
    "delete_playlist",
    "get_available_songs",
    "get_playlist",
    "get_playlist_songs",
    "get_public_playlists",
    "get_user_playlists",
    "move_song",
    "remove_song_from_playlist",
    "shuffle_playlist",
    "song_in_playlist",
    "update_playlist",
]
