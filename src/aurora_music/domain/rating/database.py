"""
Database functions for 1-5 star song ratings.
"""

import sqlite3
from typing import Sequence

from loguru import logger

from ..library.exceptions import ValidationError
from ..library.models import RatedTrack
from ..library.songs import SONG_COLUMNS, batch_fetch_song_genres, get_song, row_to_track

MIN_RATING = 1
MAX_RATING = 5


def validate_rating(value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"Rating must be an integer, got {value!r}")
    if not MIN_RATING <= value <= MAX_RATING:
        raise ValidationError(
            f"Rating must be between {MIN_RATING} and {MAX_RATING}, got {value}"
        )
    return value


def save_rating(conn: sqlite3.Connection, user_id: int, song_id: int, value: int) -> None:
    """Insert a user's rating for a song, replacing any earlier rating.

    Raises:
        ValidationError: If the value is outside 1-5
        NotFoundError: If the song does not exist
    """
    validate_rating(value)
    get_song(conn, song_id)

    with conn:
        conn.execute(
            """
            INSERT INTO ratings (user_id, song_id, rating)
            VALUES (?, ?, ?)
            ON CONFLICT (user_id, song_id)
            DO UPDATE SET rating = excluded.rating, rated_at = CURRENT_TIMESTAMP
            """,
            (user_id, song_id, value),
        )
    logger.debug(f"User {user_id} rated song {song_id}: {value}")


def get_song_ratings(conn: sqlite3.Connection, song_id: int) -> list[dict]:
    cursor = conn.execute(
        """
        SELECT id, user_id, song_id, rating, rated_at
        FROM ratings WHERE song_id = ?
        ORDER BY rated_at DESC, id DESC
        """,
        (song_id,),
    )
    return [dict(row) for row in cursor.fetchall()]


def get_user_ratings(conn: sqlite3.Connection, user_id: int) -> dict[int, int]:
    """Map of song id to the user's rating."""
    cursor = conn.execute(
        "SELECT song_id, rating FROM ratings WHERE user_id = ?", (user_id,)
    )
    return {row["song_id"]: row["rating"] for row in cursor.fetchall()}


def get_rating_stats_for_songs(
    conn: sqlite3.Connection, song_ids: Sequence[int]
) -> dict[int, tuple[float, int]]:
    """Average and count of ratings per song, in one query.

    Songs without ratings are omitted.
    """
    if not song_ids:
        return {}
    placeholders = ",".join("?" * len(song_ids))
    cursor = conn.execute(
        f"""
        SELECT song_id, AVG(rating) AS average, COUNT(*) AS count
        FROM ratings
        WHERE song_id IN ({placeholders})
        GROUP BY song_id
        """,
        list(song_ids),
    )
    return {
        row["song_id"]: (float(row["average"]), row["count"])
        for row in cursor.fetchall()
    }


def get_top_rated_songs(conn: sqlite3.Connection, limit: int = 10) -> list[RatedTrack]:
    """Highest average rating first; ties broken by number of ratings."""
    cursor = conn.execute(
        f"""
        SELECT {SONG_COLUMNS}, AVG(r.rating) AS average, COUNT(r.id) AS count
        FROM songs s
        JOIN ratings r ON r.song_id = s.id
        GROUP BY s.id
        ORDER BY average DESC, count DESC, s.id ASC
        LIMIT ?
        """,
        (limit,),
    )
    rows = cursor.fetchall()
    genres = batch_fetch_song_genres(conn, [row["id"] for row in rows])
    return [
        RatedTrack(
            track=row_to_track(row, genres.get(row["id"], ())),
            average_rating=round(float(row["average"]), 2),
            rating_count=row["count"],
        )
        for row in rows
    ]
