"""
User records used for ownership and admin checks.

There is no authentication here: a user id identifies the caller, and the
``is_admin`` flag gates moderation actions.
"""

import sqlite3
from typing import NamedTuple, Optional

from loguru import logger

from ..library.exceptions import (
    DuplicateError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)


class User(NamedTuple):
    id: int
    username: str
    is_admin: bool = False
    created_at: Optional[str] = None


def _row_to_user(row: sqlite3.Row) -> User:
    return User(
        id=row["id"],
        username=row["username"],
        is_admin=bool(row["is_admin"]),
        created_at=row["created_at"],
    )


def create_user(conn: sqlite3.Connection, username: str, is_admin: bool = False) -> User:
    """Create a user.

    Raises:
        ValidationError: If the username is blank
        DuplicateError: If the username is taken
    """
    if not username or not username.strip():
        raise ValidationError("Username cannot be empty")
    username = username.strip()

    try:
        with conn:
            cursor = conn.execute(
                "INSERT INTO users (username, is_admin) VALUES (?, ?)",
                (username, int(is_admin)),
            )
    except sqlite3.IntegrityError as e:
        raise DuplicateError(f"Username '{username}' is already taken") from e

    logger.info(f"Created user {cursor.lastrowid} ({username}, admin={is_admin})")
    return get_user(conn, cursor.lastrowid)


def get_user(conn: sqlite3.Connection, user_id: int) -> User:
    row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
    if row is None:
        raise NotFoundError("User", user_id)
    return _row_to_user(row)


def require_admin(conn: sqlite3.Connection, user_id: int) -> User:
    """Return the user if they are an admin.

    Raises:
        NotFoundError: If the user does not exist
        PermissionDeniedError: If the user is not an admin
    """
    user = get_user(conn, user_id)
    if not user.is_admin:
        raise PermissionDeniedError("You do not have permission to do this.")
    return user


def list_users(conn: sqlite3.Connection) -> list[User]:
    cursor = conn.execute("SELECT * FROM users ORDER BY username COLLATE NOCASE")
    return [_row_to_user(row) for row in cursor.fetchall()]


def delete_user(conn: sqlite3.Connection, user_id: int, acting_admin: User) -> None:
    """Delete a user along with their songs, playlists, ratings, and requests.

    Raises:
        ValidationError: If the admin targets their own account
        NotFoundError: If the user does not exist
    """
    if user_id == acting_admin.id:
        raise ValidationError("You cannot delete yourself!")
    get_user(conn, user_id)

    with conn:
        conn.execute("DELETE FROM users WHERE id = ?", (user_id,))
    logger.info(f"Admin {acting_admin.id} deleted user {user_id}")


def set_admin(
    conn: sqlite3.Connection, user_id: int, is_admin: bool, acting_admin: User
) -> User:
    """Grant or revoke admin rights.

    Raises:
        ValidationError: If the admin targets their own account
        NotFoundError: If the user does not exist
    """
    if user_id == acting_admin.id:
        raise ValidationError("You cannot change your own admin status!")
    get_user(conn, user_id)

    with conn:
        conn.execute(
            "UPDATE users SET is_admin = ? WHERE id = ?", (int(is_admin), user_id)
        )
    logger.info(f"Admin {acting_admin.id} set admin={is_admin} for user {user_id}")
    return get_user(conn, user_id)
