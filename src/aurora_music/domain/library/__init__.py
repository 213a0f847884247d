"""Library domain - the song catalog.

This domain handles:
- Song storage, search, and play counts
- Genres, song tagging, and genre requests
- MP3 detection and upload validation
"""

from .exceptions import (
    AuroraError,
    DuplicateError,
    NotFoundError,
    PermissionDeniedError,
    UploadValidationError,
    ValidationError,
)
from .models import Genre, GenreRequest, RatedTrack, SiteStats, Track

__all__ = [
    "AuroraError",
    "DuplicateError",
    "NotFoundError",
    "PermissionDeniedError",
    "UploadValidationError",
    "ValidationError",
    "Genre",
    "GenreRequest",
    "RatedTrack",
    "SiteStats",
    "Track",
]
