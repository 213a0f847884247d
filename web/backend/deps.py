import uuid
from typing import AsyncGenerator, Optional

from fastapi import Depends, Header, Request, Response

from aurora_music.core.config import Config, load_config
from aurora_music.core.database import get_db_connection
from aurora_music.domain.accounts import User, get_user, require_admin
from aurora_music.domain.playback import PlaybackQueueEngine, SessionRegistry

from .errors import domain_errors

SESSION_HEADER = "X-Session-Id"
SESSION_COOKIE = "aurora_session"

# In-memory sessions (lost on server restart)
session_registry = SessionRegistry()


async def get_db() -> AsyncGenerator:
    """FastAPI dependency for database connections."""
    with get_db_connection() as conn:
        yield conn


def get_config() -> Config:
    """FastAPI dependency for configuration."""
    return load_config()


async def get_session_id(
    request: Request,
    response: Response,
    x_session_id: Optional[str] = Header(None),
) -> str:
    """Identify the listening session.

    The ``X-Session-Id`` header wins over the ``aurora_session`` cookie. When
    neither is present a new id is generated and handed back as a cookie.
    """
    session_id = x_session_id or request.cookies.get(SESSION_COOKIE)
    if not session_id:
        session_id = uuid.uuid4().hex
        response.set_cookie(SESSION_COOKIE, session_id, httponly=True, samesite="lax")
    return session_id


async def get_player(session_id: str = Depends(get_session_id)) -> PlaybackQueueEngine:
    """The playback engine for the caller's session."""
    return session_registry.get(session_id)


async def get_current_user(x_user_id: int = Header(...), db=Depends(get_db)) -> User:
    """The acting user named by the ``X-User-Id`` header."""
    with domain_errors("load user"):
        return get_user(db, x_user_id)


async def get_optional_user(
    x_user_id: Optional[int] = Header(None), db=Depends(get_db)
) -> Optional[User]:
    if x_user_id is None:
        return None
    with domain_errors("load user"):
        return get_user(db, x_user_id)


async def get_current_admin(x_user_id: int = Header(...), db=Depends(get_db)) -> User:
    with domain_errors("load user"):
        return require_admin(db, x_user_id)
