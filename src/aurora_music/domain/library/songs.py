"""
Song catalog queries.

Every function takes an open sqlite3 connection so callers control the
connection lifetime (FastAPI dependency, CLI context manager, or test fixture).
Audio bytes are never loaded by the listing queries.
"""

import sqlite3
from typing import Optional, Sequence

from loguru import logger

from .exceptions import NotFoundError, ValidationError
from .models import Track

SONG_COLUMNS = "s.id, s.title, s.duration, s.owner_id, s.uploaded_at, s.plays"


def row_to_track(row: sqlite3.Row, genres: Sequence[str] = ()) -> Track:
    """Convert a songs row (without audio_data) to a Track."""
    return Track(
        id=row["id"],
        title=row["title"],
        duration=float(row["duration"] or 0),
        owner_id=row["owner_id"],
        uploaded_at=row["uploaded_at"],
        plays=row["plays"] or 0,
        genres=tuple(genres),
    )


def batch_fetch_song_genres(
    conn: sqlite3.Connection, song_ids: Sequence[int]
) -> dict[int, tuple[str, ...]]:
    """Genre names per song, fetched in one query and sorted by name."""
    if not song_ids:
        return {}

    placeholders = ",".join("?" * len(song_ids))
    cursor = conn.execute(
        f"""
        SELECT sg.song_id, g.name
        FROM song_genres sg
        JOIN genres g ON g.id = sg.genre_id
        WHERE sg.song_id IN ({placeholders})
        ORDER BY g.name
        """,
        list(song_ids),
    )

    genres: dict[int, list[str]] = {}
    for row in cursor.fetchall():
        genres.setdefault(row["song_id"], []).append(row["name"])
    return {song_id: tuple(names) for song_id, names in genres.items()}


def rows_to_tracks(conn: sqlite3.Connection, rows: list[sqlite3.Row]) -> list[Track]:
    genres = batch_fetch_song_genres(conn, [row["id"] for row in rows])
    return [row_to_track(row, genres.get(row["id"], ())) for row in rows]


def _select_tracks(conn: sqlite3.Connection, where_order: str = "", params: Sequence = ()) -> list[Track]:
    cursor = conn.execute(f"SELECT {SONG_COLUMNS} FROM songs s {where_order}", list(params))
    return rows_to_tracks(conn, cursor.fetchall())


def get_all_songs(conn: sqlite3.Connection) -> list[Track]:
    return _select_tracks(conn, "ORDER BY s.title COLLATE NOCASE")


def search_songs(conn: sqlite3.Connection, text: str) -> list[Track]:
    """Case-insensitive substring search on song titles."""
    text = text.strip()
    if not text:
        return get_all_songs(conn)
    return _select_tracks(
        conn, "WHERE s.title LIKE ? ORDER BY s.title COLLATE NOCASE", (f"%{text}%",)
    )


def get_songs_by_owner(conn: sqlite3.Connection, owner_id: int) -> list[Track]:
    return _select_tracks(
        conn, "WHERE s.owner_id = ? ORDER BY s.uploaded_at DESC, s.id DESC", (owner_id,)
    )


def get_popular_songs(conn: sqlite3.Connection, limit: int = 10) -> list[Track]:
    return _select_tracks(conn, "ORDER BY s.plays DESC, s.id ASC LIMIT ?", (limit,))


def get_new_songs(conn: sqlite3.Connection, limit: int = 10) -> list[Track]:
    return _select_tracks(conn, "ORDER BY s.uploaded_at DESC, s.id DESC LIMIT ?", (limit,))


def find_song(conn: sqlite3.Connection, song_id: int) -> Optional[Track]:
    tracks = _select_tracks(conn, "WHERE s.id = ?", (song_id,))
    return tracks[0] if tracks else None


def get_song(conn: sqlite3.Connection, song_id: int) -> Track:
    """Fetch one song.

    Raises:
        NotFoundError: If the song does not exist
    """
    track = find_song(conn, song_id)
    if track is None:
        raise NotFoundError("Song", song_id)
    return track


def get_songs_by_ids(conn: sqlite3.Connection, song_ids: Sequence[int]) -> list[Track]:
    """Fetch songs preserving the order of ``song_ids`` (missing ids are skipped)."""
    if not song_ids:
        return []
    placeholders = ",".join("?" * len(song_ids))
    tracks = _select_tracks(conn, f"WHERE s.id IN ({placeholders})", song_ids)
    by_id = {track.id: track for track in tracks}
    return [by_id[song_id] for song_id in song_ids if song_id in by_id]


def get_song_audio(conn: sqlite3.Connection, song_id: int) -> bytes:
    """Load the stored MP3 bytes for a song.

    Raises:
        NotFoundError: If the song does not exist
    """
    row = conn.execute("SELECT audio_data FROM songs WHERE id = ?", (song_id,)).fetchone()
    if row is None:
        raise NotFoundError("Song", song_id)
    return bytes(row["audio_data"])


def increment_play_count(conn: sqlite3.Connection, song_id: int) -> None:
    conn.execute("UPDATE songs SET plays = plays + 1 WHERE id = ?", (song_id,))
    conn.commit()


def _validate_genre_ids(conn: sqlite3.Connection, genre_ids: Sequence[int]) -> list[int]:
    unique_ids = list(dict.fromkeys(genre_ids))
    if not unique_ids:
        return []
    placeholders = ",".join("?" * len(unique_ids))
    cursor = conn.execute(
        f"SELECT id FROM genres WHERE id IN ({placeholders})", unique_ids
    )
    known = {row["id"] for row in cursor.fetchall()}
    missing = [genre_id for genre_id in unique_ids if genre_id not in known]
    if missing:
        raise ValidationError(f"Unknown genre ids: {missing}")
    return unique_ids


def insert_song(
    conn: sqlite3.Connection,
    title: str,
    duration: int,
    audio_data: bytes,
    owner_id: int,
    genre_ids: Sequence[int] = (),
) -> Track:
    """Insert a song and its genre tags in one transaction."""
    genre_ids = _validate_genre_ids(conn, genre_ids)
    with conn:
        cursor = conn.execute(
            """
            INSERT INTO songs (title, duration, audio_data, owner_id)
            VALUES (?, ?, ?, ?)
            """,
            (title, duration, sqlite3.Binary(audio_data), owner_id),
        )
        song_id = cursor.lastrowid
        conn.executemany(
            "INSERT INTO song_genres (song_id, genre_id) VALUES (?, ?)",
            [(song_id, genre_id) for genre_id in genre_ids],
        )
    logger.info(f"Stored song {song_id} ({title!r}, {len(audio_data)} bytes)")
    return get_song(conn, song_id)


def set_song_genres(conn: sqlite3.Connection, song_id: int, genre_ids: Sequence[int]) -> Track:
    """Replace a song's genre tags."""
    get_song(conn, song_id)
    genre_ids = _validate_genre_ids(conn, genre_ids)
    with conn:
        conn.execute("DELETE FROM song_genres WHERE song_id = ?", (song_id,))
        conn.executemany(
            "INSERT INTO song_genres (song_id, genre_id) VALUES (?, ?)",
            [(song_id, genre_id) for genre_id in genre_ids],
        )
    return get_song(conn, song_id)


def delete_song(conn: sqlite3.Connection, song_id: int) -> None:
    """Delete a song with its genre tags, ratings, and playlist entries.

    Raises:
        NotFoundError: If the song does not exist
    """
    with conn:
        playlist_ids = [
            row["playlist_id"]
            for row in conn.execute(
                "SELECT playlist_id FROM playlist_songs WHERE song_id = ?", (song_id,)
            ).fetchall()
        ]
        cursor = conn.execute("DELETE FROM songs WHERE id = ?", (song_id,))
        if cursor.rowcount == 0:
            raise NotFoundError("Song", song_id)

    # Close the gaps the cascade left in playlist positions
    from ..playlists.crud import compact_positions

    for playlist_id in playlist_ids:
        compact_positions(conn, playlist_id)
    logger.info(f"Deleted song {song_id}")
