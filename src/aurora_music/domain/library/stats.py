"""Site-wide totals shown on the home page."""

import sqlite3

from .models import SiteStats


def get_site_stats(conn: sqlite3.Connection) -> SiteStats:
    """Count songs, users, and playlists and sum play counts in a single query."""
    row = conn.execute("""
        SELECT
            (SELECT COUNT(*) FROM songs) AS total_songs,
            (SELECT COUNT(*) FROM users) AS total_users,
            (SELECT COUNT(*) FROM playlists) AS total_playlists,
            (SELECT COALESCE(SUM(plays), 0) FROM songs) AS total_plays
    """).fetchone()
    return SiteStats(
        total_songs=row["total_songs"],
        total_users=row["total_users"],
        total_playlists=row["total_playlists"],
        total_plays=row["total_plays"],
    )


def get_genre_usage_for_user(conn: sqlite3.Connection, user_id: int) -> list[dict]:
    """How often each genre appears across a user's playlists, most used first."""
    cursor = conn.execute(
        """
        SELECT g.id AS genre_id, g.name AS genre_name, COUNT(*) AS count
        FROM playlists p
        JOIN playlist_songs ps ON ps.playlist_id = p.id
        JOIN song_genres sg ON sg.song_id = ps.song_id
        JOIN genres g ON g.id = sg.genre_id
        WHERE p.owner_id = ?
        GROUP BY g.id, g.name
        ORDER BY count DESC, g.name ASC
        """,
        (user_id,),
    )
    return [dict(row) for row in cursor.fetchall()]
