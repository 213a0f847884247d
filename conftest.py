"""Shared fixtures: every test gets its own config and data directories."""

import pytest

from aurora_music.core.database import get_db_connection, init_database

# Bytes that pass the MP3 header sniff; durations are patched where needed
FAKE_MP3 = b"ID3\x04\x00\x00\x00\x00\x00\x00" + b"\x00" * 256
FAKE_MP3_FRAME = b"\xff\xfb\x90\x64" + b"\x00" * 256


@pytest.fixture(autouse=True)
def isolated_dirs(tmp_path, monkeypatch):
    """Point XDG directories at a temp dir so no test touches real user data."""
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    for name in ("ALLOWED_ORIGINS", "AURORA_DEFAULT_VOLUME", "AURORA_MAX_UPLOAD_MB"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def db(isolated_dirs):
    """A migrated database connection."""
    init_database()
    with get_db_connection() as conn:
        yield conn


@pytest.fixture
def fake_mp3() -> bytes:
    return FAKE_MP3
