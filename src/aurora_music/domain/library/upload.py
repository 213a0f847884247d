"""
Song upload validation and storage.
"""

import sqlite3
from typing import Optional, Sequence

from loguru import logger

from ...core.config import UploadConfig
from .audio import get_mp3_duration, looks_like_mp3
from .exceptions import UploadValidationError
from .models import Track
from .songs import insert_song


def validate_upload(
    title: Optional[str],
    genre_ids: Sequence[int],
    content_type: Optional[str],
    data: Optional[bytes],
    config: UploadConfig,
) -> str:
    """Check an upload before anything is stored.

    Returns:
        The trimmed title

    Raises:
        UploadValidationError: Describing the first failed check
    """
    if title is None or not title.strip():
        raise UploadValidationError("Please enter a song title.")

    if not genre_ids:
        raise UploadValidationError("Please select at least one genre.")

    if not data:
        raise UploadValidationError("Please select an audio file.")

    if not content_type or not content_type.startswith(config.allowed_content_prefix):
        raise UploadValidationError("Please select a valid audio file.")

    if len(data) > config.max_file_size_bytes:
        raise UploadValidationError(
            f"File size must be less than {config.max_file_size_mb}MB."
        )

    if not looks_like_mp3(data):
        raise UploadValidationError("Only MP3 files are supported.")

    return title.strip()


def upload_song(
    conn: sqlite3.Connection,
    owner_id: int,
    title: Optional[str],
    genre_ids: Sequence[int],
    content_type: Optional[str],
    data: Optional[bytes],
    config: UploadConfig,
) -> Track:
    """Validate, measure, and store an uploaded MP3.

    Raises:
        UploadValidationError: If validation fails or the duration can't be read
        ValidationError: If a genre id is unknown
    """
    clean_title = validate_upload(title, genre_ids, content_type, data, config)

    duration = get_mp3_duration(data)
    if duration is None:
        raise UploadValidationError("Could not read the audio duration of this file.")

    logger.info(
        f"Upload from user {owner_id}: {clean_title!r}, {len(data)} bytes, "
        f"{duration}s, genres={list(genre_ids)}"
    )
    return insert_song(conn, clean_title, duration, data, owner_id, genre_ids)
