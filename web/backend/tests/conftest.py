"""Fixtures for API tests: a migrated database and a TestClient per test."""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from aurora_music.core.database import get_db_connection, init_database
from aurora_music.domain.accounts import create_user
from web.backend.deps import session_registry
from web.backend.main import app


@pytest.fixture
def client(isolated_dirs):
    init_database()
    session_registry.clear()
    yield TestClient(app)
    session_registry.clear()


@pytest.fixture
def make_user(client):
    """Register a user over HTTP; admins are created directly, as the CLI does."""

    def _make_user(username: str, is_admin: bool = False) -> dict:
        if is_admin:
            with get_db_connection() as conn:
                user_id = create_user(conn, username, is_admin=True).id
            return client.get(f"/api/users/{user_id}").json()

        response = client.post("/api/users", json={"username": username})
        assert response.status_code == 201
        return response.json()

    return _make_user


@pytest.fixture
def upload(client, fake_mp3):
    """Upload a song as a user; MP3 duration reading is patched."""

    def _upload(user_id: int, title: str, genre_ids=(1,), duration: int = 200) -> dict:
        with patch(
            "aurora_music.domain.library.upload.get_mp3_duration", return_value=duration
        ):
            response = client.post(
                "/api/songs",
                data={"title": title, "genreIds": [str(g) for g in genre_ids]},
                files={"file": (f"{title}.mp3", fake_mp3, "audio/mpeg")},
                headers={"X-User-Id": str(user_id)},
            )
        assert response.status_code == 201, response.text
        return response.json()

    return _upload


@pytest.fixture
def anyio_backend():
    """The sync manager is built on asyncio; run async tests on that backend only."""
    return "asyncio"
