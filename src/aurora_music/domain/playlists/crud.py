"""
Playlist CRUD operations.

Positions within a playlist are 0-indexed and kept dense (0..n-1) after
every add, remove, and move.
"""

import random
import sqlite3
from typing import Any, Optional

from loguru import logger

from ..library.exceptions import DuplicateError, NotFoundError, ValidationError
from ..library.models import Track
from ..library.songs import SONG_COLUMNS, rows_to_tracks, get_song

MAX_PLAYLIST_NAME_LENGTH = 100

PLAYLIST_SELECT = """
    SELECT
        p.id, p.name, p.owner_id, p.is_public, p.created_at,
        (SELECT COUNT(*) FROM playlist_songs ps WHERE ps.playlist_id = p.id) AS song_count
    FROM playlists p
"""


def _row_to_playlist(row: sqlite3.Row) -> dict[str, Any]:
    playlist = dict(row)
    playlist["is_public"] = bool(playlist["is_public"])
    return playlist


def _validate_name(name: Optional[str]) -> str:
    if name is None or not name.strip():
        raise ValidationError("Playlist name cannot be empty")
    name = name.strip()
    if len(name) > MAX_PLAYLIST_NAME_LENGTH:
        raise ValidationError(
            f"Playlist name must be at most {MAX_PLAYLIST_NAME_LENGTH} characters"
        )
    return name


def create_playlist(
    conn: sqlite3.Connection, owner_id: int, name: str, is_public: bool = False
) -> dict[str, Any]:
    """
    Create a new playlist.

    Args:
        conn: Database connection
        owner_id: User who owns the playlist
        name: Playlist name (trimmed, non-empty)
        is_public: Whether other users can see it

    Returns:
        The created playlist dict
    """
    name = _validate_name(name)
    with conn:
        cursor = conn.execute(
            "INSERT INTO playlists (name, owner_id, is_public) VALUES (?, ?, ?)",
            (name, owner_id, int(is_public)),
        )
    logger.info(f"Created playlist {cursor.lastrowid} ({name!r}) for user {owner_id}")
    return get_playlist(conn, cursor.lastrowid)


def get_playlist(conn: sqlite3.Connection, playlist_id: int) -> dict[str, Any]:
    row = conn.execute(f"{PLAYLIST_SELECT} WHERE p.id = ?", (playlist_id,)).fetchone()
    if row is None:
        raise NotFoundError("Playlist", playlist_id)
    return _row_to_playlist(row)


def get_user_playlists(conn: sqlite3.Connection, owner_id: int) -> list[dict[str, Any]]:
    cursor = conn.execute(
        f"{PLAYLIST_SELECT} WHERE p.owner_id = ? ORDER BY p.name COLLATE NOCASE",
        (owner_id,),
    )
    return [_row_to_playlist(row) for row in cursor.fetchall()]


def get_public_playlists(conn: sqlite3.Connection) -> list[dict[str, Any]]:
    cursor = conn.execute(
        f"{PLAYLIST_SELECT} WHERE p.is_public = 1 ORDER BY p.created_at DESC, p.id DESC"
    )
    return [_row_to_playlist(row) for row in cursor.fetchall()]


def update_playlist(
    conn: sqlite3.Connection,
    playlist_id: int,
    name: Optional[str] = None,
    is_public: Optional[bool] = None,
) -> dict[str, Any]:
    """Rename a playlist and/or change its visibility."""
    get_playlist(conn, playlist_id)
    with conn:
        if name is not None:
            conn.execute(
                "UPDATE playlists SET name = ? WHERE id = ?",
                (_validate_name(name), playlist_id),
            )
        if is_public is not None:
            conn.execute(
                "UPDATE playlists SET is_public = ? WHERE id = ?",
                (int(is_public), playlist_id),
            )
    return get_playlist(conn, playlist_id)


def delete_playlist(conn: sqlite3.Connection, playlist_id: int) -> None:
    with conn:
        cursor = conn.execute("DELETE FROM playlists WHERE id = ?", (playlist_id,))
    if cursor.rowcount == 0:
        raise NotFoundError("Playlist", playlist_id)
    logger.info(f"Deleted playlist {playlist_id}")


def get_playlist_songs(conn: sqlite3.Connection, playlist_id: int) -> list[Track]:
    """Songs in playlist order."""
    get_playlist(conn, playlist_id)
    cursor = conn.execute(
        f"""
        SELECT {SONG_COLUMNS}
        FROM playlist_songs ps
        JOIN songs s ON s.id = ps.song_id
        WHERE ps.playlist_id = ?
        ORDER BY ps.position
        """,
        (playlist_id,),
    )
    return rows_to_tracks(conn, cursor.fetchall())


def song_in_playlist(conn: sqlite3.Connection, playlist_id: int, song_id: int) -> bool:
    row = conn.execute(
        "SELECT 1 FROM playlist_songs WHERE playlist_id = ? AND song_id = ?",
        (playlist_id, song_id),
    ).fetchone()
    return row is not None


def add_song_to_playlist(conn: sqlite3.Connection, playlist_id: int, song_id: int) -> int:
    """
    Append a song to a playlist.

    Returns:
        The 0-indexed position the song was placed at

    Raises:
        NotFoundError: If the playlist or song does not exist
        DuplicateError: If the song is already in the playlist
    """
    get_playlist(conn, playlist_id)
    get_song(conn, song_id)
    if song_in_playlist(conn, playlist_id, song_id):
        raise DuplicateError(f"Song {song_id} is already in playlist {playlist_id}")

    with conn:
        row = conn.execute(
            "SELECT COUNT(*) AS count FROM playlist_songs WHERE playlist_id = ?",
            (playlist_id,),
        ).fetchone()
        position = row["count"]
        conn.execute(
            "INSERT INTO playlist_songs (playlist_id, song_id, position) VALUES (?, ?, ?)",
            (playlist_id, song_id, position),
        )
    logger.debug(f"Added song {song_id} to playlist {playlist_id} at position {position}")
    return position


def compact_positions(conn: sqlite3.Connection, playlist_id: int) -> None:
    """Renumber positions to 0..n-1 preserving order."""
    with conn:
        cursor = conn.execute(
            "SELECT song_id FROM playlist_songs WHERE playlist_id = ? ORDER BY position",
            (playlist_id,),
        )
        song_ids = [row["song_id"] for row in cursor.fetchall()]
        conn.executemany(
            "UPDATE playlist_songs SET position = ? WHERE playlist_id = ? AND song_id = ?",
            [(i, playlist_id, song_id) for i, song_id in enumerate(song_ids)],
        )


def remove_song_from_playlist(conn: sqlite3.Connection, playlist_id: int, song_id: int) -> None:
    """
    Remove a song from a playlist.

    Raises:
        NotFoundError: If the song is not in the playlist
    """
    with conn:
        cursor = conn.execute(
            "DELETE FROM playlist_songs WHERE playlist_id = ? AND song_id = ?",
            (playlist_id, song_id),
        )
    if cursor.rowcount == 0:
        raise NotFoundError("Playlist entry", f"{playlist_id}/{song_id}")
    compact_positions(conn, playlist_id)


def move_song(conn: sqlite3.Connection, playlist_id: int, from_pos: int, to_pos: int) -> None:
    """
    Move a song within a playlist.

    Args:
        playlist_id: Playlist ID
        from_pos: Current position (0-indexed)
        to_pos: Target position (0-indexed)

    Raises:
        ValidationError: If either position is out of range
    """
    get_playlist(conn, playlist_id)
    with conn:
        cursor = conn.execute(
            "SELECT song_id FROM playlist_songs WHERE playlist_id = ? ORDER BY position",
            (playlist_id,),
        )
        song_ids = [row["song_id"] for row in cursor.fetchall()]

        if not (0 <= from_pos < len(song_ids) and 0 <= to_pos < len(song_ids)):
            raise ValidationError(
                f"Positions must be between 0 and {len(song_ids) - 1}"
            )

        song_ids.insert(to_pos, song_ids.pop(from_pos))
        conn.executemany(
            "UPDATE playlist_songs SET position = ? WHERE playlist_id = ? AND song_id = ?",
            [(i, playlist_id, song_id) for i, song_id in enumerate(song_ids)],
        )


def shuffle_playlist(
    conn: sqlite3.Connection, playlist_id: int, rng: Optional[random.Random] = None
) -> list[Track]:
    """Randomly reorder a playlist and store the new positions.

    Returns:
        The songs in their new order
    """
    get_playlist(conn, playlist_id)
    rng = rng or random.Random()
    with conn:
        cursor = conn.execute(
            "SELECT song_id FROM playlist_songs WHERE playlist_id = ? ORDER BY position",
            (playlist_id,),
        )
        song_ids = [row["song_id"] for row in cursor.fetchall()]
        rng.shuffle(song_ids)
        conn.executemany(
            "UPDATE playlist_songs SET position = ? WHERE playlist_id = ? AND song_id = ?",
            [(i, playlist_id, song_id) for i, song_id in enumerate(song_ids)],
        )
    logger.debug(f"Shuffled {len(song_ids)} songs in playlist {playlist_id}")
    return get_playlist_songs(conn, playlist_id)


def get_available_songs(conn: sqlite3.Connection, playlist_id: int) -> list[Track]:
    """Songs that can still be added to a playlist, by title."""
    get_playlist(conn, playlist_id)
    cursor = conn.execute(
        f"""
        SELECT {SONG_COLUMNS}
        FROM songs s
        WHERE s.id NOT IN (
            SELECT song_id FROM playlist_songs WHERE playlist_id = ?
        )
        ORDER BY s.title COLLATE NOCASE
        """,
        (playlist_id,),
    )
    return rows_to_tracks(conn, cursor.fetchall())
