"""
Music library domain models.

Contains data structures for representing songs and the catalog around them.
"""

from typing import NamedTuple, Optional


class Track(NamedTuple):
    """Represents an uploaded song without its audio payload.

    The engine only relies on ``id`` for identity; the rest is display metadata.
    Audio bytes stay in the database and are streamed separately.
    """
    id: int
    title: str
    duration: float = 0.0  # in seconds, advisory (read from MP3 headers at upload)
    owner_id: Optional[int] = None
    uploaded_at: Optional[str] = None
    plays: int = 0
    genres: tuple[str, ...] = ()


class Genre(NamedTuple):
    id: int
    name: str


class GenreRequest(NamedTuple):
    id: int
    user_id: int
    genre_name: str
    status: str  # 'pending', 'approved', 'rejected'
    requested_at: Optional[str] = None
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[str] = None


class RatedTrack(NamedTuple):
    """Track joined with aggregate rating information."""
    track: Track
    average_rating: float
    rating_count: int


class SiteStats(NamedTuple):
    total_songs: int = 0
    total_users: int = 0
    total_playlists: int = 0
    total_plays: int = 0
