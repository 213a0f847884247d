"""
MP3 detection and duration reading for uploaded audio.

Uploads arrive as raw bytes, so detection works on the payload itself rather
than file names, and duration is read with Mutagen from an in-memory buffer.
"""

import io
from pathlib import Path
from typing import Optional

from loguru import logger
from mutagen import MutagenError
from mutagen.mp3 import MP3

ID3_MAGIC = b"ID3"
FRAME_SYNC_BYTE = 0xFF
FRAME_SYNC_MASK = 0xE0  # top three bits of the second header byte


def looks_like_mp3(data: bytes) -> bool:
    """Check the leading bytes for an ID3v2 tag or an MPEG audio frame sync."""
    if len(data) < 3:
        return False
    if data[:3] == ID3_MAGIC:
        return True
    return data[0] == FRAME_SYNC_BYTE and (data[1] & FRAME_SYNC_MASK) == FRAME_SYNC_MASK


def get_mp3_duration(data: bytes) -> Optional[int]:
    """Read the duration of an MP3 payload in whole seconds.

    Returns:
        Duration in seconds, or None if Mutagen cannot find an MPEG frame
    """
    try:
        audio = MP3(io.BytesIO(data))
    except MutagenError as e:
        logger.warning(f"Could not read MP3 duration: {e}")
        return None
    return int(audio.info.length)


def sniff_file(path: Path) -> tuple[bool, Optional[int]]:
    """Inspect a file on disk: (looks like MP3, duration in seconds or None)."""
    data = path.read_bytes()
    if not looks_like_mp3(data):
        return False, None
    return True, get_mp3_duration(data)
