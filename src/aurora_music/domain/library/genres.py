"""
Genres and user-submitted genre requests.

Genre names are unique without regard to case. Users propose new genres
through requests; an admin approves (creating the genre if needed) or rejects
them.
"""

import sqlite3
from typing import Optional

from loguru import logger

from .exceptions import DuplicateError, NotFoundError, ValidationError
from .models import Genre, GenreRequest

MIN_GENRE_NAME_LENGTH = 2
MAX_GENRE_NAME_LENGTH = 50

STATUS_PENDING = "pending"
STATUS_APPROVED = "approved"
STATUS_REJECTED = "rejected"


def normalize_genre_name(name: Optional[str]) -> str:
    """Trim and length-check a genre name.

    Raises:
        ValidationError: If the name is empty, too short, or too long
    """
    if name is None or not name.strip():
        raise ValidationError("Genre name cannot be empty")
    trimmed = name.strip()
    if len(trimmed) < MIN_GENRE_NAME_LENGTH:
        raise ValidationError(
            f"Genre name must be at least {MIN_GENRE_NAME_LENGTH} characters long"
        )
    if len(trimmed) > MAX_GENRE_NAME_LENGTH:
        raise ValidationError(
            f"Genre name must be less than {MAX_GENRE_NAME_LENGTH} characters"
        )
    return trimmed


def get_all_genres(conn: sqlite3.Connection) -> list[Genre]:
    cursor = conn.execute("SELECT id, name FROM genres ORDER BY name COLLATE NOCASE")
    return [Genre(id=row["id"], name=row["name"]) for row in cursor.fetchall()]


def find_genre_by_name(conn: sqlite3.Connection, name: str) -> Optional[Genre]:
    row = conn.execute(
        "SELECT id, name FROM genres WHERE name = ? COLLATE NOCASE", (name.strip(),)
    ).fetchone()
    return Genre(id=row["id"], name=row["name"]) if row else None


def create_genre(conn: sqlite3.Connection, name: str) -> Genre:
    """Add a genre.

    Raises:
        ValidationError: If the name is invalid
        DuplicateError: If a genre with the same name (any case) exists
    """
    trimmed = normalize_genre_name(name)
    if find_genre_by_name(conn, trimmed):
        raise DuplicateError(f"Genre '{trimmed}' already exists")

    with conn:
        cursor = conn.execute("INSERT INTO genres (name) VALUES (?)", (trimmed,))
    logger.info(f"Created genre {cursor.lastrowid}: {trimmed}")
    return Genre(id=cursor.lastrowid, name=trimmed)


def delete_genre(conn: sqlite3.Connection, genre_id: int) -> None:
    with conn:
        cursor = conn.execute("DELETE FROM genres WHERE id = ?", (genre_id,))
    if cursor.rowcount == 0:
        raise NotFoundError("Genre", genre_id)
    logger.info(f"Deleted genre {genre_id}")


# Genre requests


def _row_to_request(row: sqlite3.Row) -> GenreRequest:
    return GenreRequest(
        id=row["id"],
        user_id=row["user_id"],
        genre_name=row["genre_name"],
        status=row["status"],
        requested_at=row["requested_at"],
        reviewed_by=row["reviewed_by"],
        reviewed_at=row["reviewed_at"],
    )


def get_genre_request(conn: sqlite3.Connection, request_id: int) -> GenreRequest:
    row = conn.execute(
        "SELECT * FROM genre_requests WHERE id = ?", (request_id,)
    ).fetchone()
    if row is None:
        raise NotFoundError("Genre request", request_id)
    return _row_to_request(row)


def submit_genre_request(conn: sqlite3.Connection, user_id: int, genre_name: str) -> GenreRequest:
    """Ask for a new genre.

    Raises:
        ValidationError: If the name is invalid
        DuplicateError: If the genre exists or a pending request already names it
    """
    trimmed = normalize_genre_name(genre_name)
    if find_genre_by_name(conn, trimmed):
        raise DuplicateError(f"Genre '{trimmed}' already exists")

    pending = conn.execute(
        """
        SELECT COUNT(*) AS count FROM genre_requests
        WHERE status = ? AND genre_name = ? COLLATE NOCASE
        """,
        (STATUS_PENDING, trimmed),
    ).fetchone()
    if pending["count"] > 0:
        raise DuplicateError(f"Genre '{trimmed}' has already been requested")

    with conn:
        cursor = conn.execute(
            "INSERT INTO genre_requests (user_id, genre_name) VALUES (?, ?)",
            (user_id, trimmed),
        )
    logger.info(f"User {user_id} requested genre {trimmed!r}")
    return get_genre_request(conn, cursor.lastrowid)


def get_pending_requests(conn: sqlite3.Connection) -> list[GenreRequest]:
    cursor = conn.execute(
        "SELECT * FROM genre_requests WHERE status = ? ORDER BY requested_at DESC, id DESC",
        (STATUS_PENDING,),
    )
    return [_row_to_request(row) for row in cursor.fetchall()]


def get_pending_count(conn: sqlite3.Connection) -> int:
    row = conn.execute(
        "SELECT COUNT(*) AS count FROM genre_requests WHERE status = ?",
        (STATUS_PENDING,),
    ).fetchone()
    return row["count"]


def get_user_requests(conn: sqlite3.Connection, user_id: int) -> list[GenreRequest]:
    cursor = conn.execute(
        "SELECT * FROM genre_requests WHERE user_id = ? ORDER BY requested_at DESC, id DESC",
        (user_id,),
    )
    return [_row_to_request(row) for row in cursor.fetchall()]


def _review_request(
    conn: sqlite3.Connection, request_id: int, admin_id: int, status: str
) -> None:
    conn.execute(
        """
        UPDATE genre_requests
        SET status = ?, reviewed_by = ?, reviewed_at = CURRENT_TIMESTAMP
        WHERE id = ?
        """,
        (status, admin_id, request_id),
    )


def approve_request(conn: sqlite3.Connection, request_id: int, admin_id: int) -> GenreRequest:
    """Approve a request, creating the genre unless it already exists."""
    request = get_genre_request(conn, request_id)
    if request.status != STATUS_PENDING:
        raise ValidationError(f"Genre request {request_id} is already {request.status}")

    with conn:
        if find_genre_by_name(conn, request.genre_name) is None:
            conn.execute("INSERT INTO genres (name) VALUES (?)", (request.genre_name,))
        _review_request(conn, request_id, admin_id, STATUS_APPROVED)
    logger.info(f"Admin {admin_id} approved genre request {request_id} ({request.genre_name})")
    return get_genre_request(conn, request_id)


def reject_request(conn: sqlite3.Connection, request_id: int, admin_id: int) -> GenreRequest:
    request = get_genre_request(conn, request_id)
    if request.status != STATUS_PENDING:
        raise ValidationError(f"Genre request {request_id} is already {request.status}")

    with conn:
        _review_request(conn, request_id, admin_id, STATUS_REJECTED)
    logger.info(f"Admin {admin_id} rejected genre request {request_id}")
    return get_genre_request(conn, request_id)
