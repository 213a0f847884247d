"""Tests for MP3 sniffing and duration reading."""

from unittest.mock import MagicMock, patch

import pytest
from mutagen import MutagenError

from aurora_music.domain.library.audio import get_mp3_duration, looks_like_mp3, sniff_file


@pytest.mark.parametrize(
    "data",
    [
        b"ID3\x04\x00",
        b"\xff\xfb\x90\x64",  # MPEG-1 Layer III
        b"\xff\xf3\x00",  # MPEG-2 Layer III
        b"\xff\xe0\x00",  # lowest byte with the sync bits set
    ],
)
def test_accepts_mp3_headers(data):
    assert looks_like_mp3(data) is True


@pytest.mark.parametrize(
    "data",
    [
        b"",
        b"ID",
        b"\xff\xfb",  # too short
        b"RIFF\x00\x00\x00\x00WAVE",
        b"OggS\x00\x02",
        b"\xff\xd8\xff",  # JPEG
        b"id3\x04",  # tag marker is case sensitive
    ],
)
def test_rejects_other_payloads(data):
    assert looks_like_mp3(data) is False


def test_duration_is_whole_seconds():
    fake = MagicMock()
    fake.info.length = 183.6
    with patch("aurora_music.domain.library.audio.MP3", return_value=fake):
        assert get_mp3_duration(b"ID3\x04\x00") == 183


def test_unreadable_duration_returns_none():
    with patch("aurora_music.domain.library.audio.MP3", side_effect=MutagenError("bad")):
        assert get_mp3_duration(b"ID3\x04\x00") is None


def test_sniff_file_reads_from_disk(tmp_path):
    path = tmp_path / "song.mp3"
    path.write_bytes(b"ID3\x04\x00" + b"\x00" * 32)
    with patch("aurora_music.domain.library.audio.get_mp3_duration", return_value=61):
        assert sniff_file(path) == (True, 61)


def test_sniff_file_skips_duration_for_non_mp3(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_bytes(b"hello world")
    assert sniff_file(path) == (False, None)
