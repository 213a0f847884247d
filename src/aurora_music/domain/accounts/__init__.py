"""Accounts domain - user identity for ownership and moderation."""

from .crud import (
    User,
    create_user,
    delete_user,
    get_user,
    list_users,
    require_admin,
    set_admin,
)

__all__ = [
    "User",
    "create_user",
    "delete_user",
    "get_user",
    "list_users",
    "require_admin",
    "set_admin",
]
