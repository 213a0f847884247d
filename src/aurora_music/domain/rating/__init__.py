"""Rating domain - 1-5 star ratings per user and song."""

from .database import (
    MAX_RATING,
    MIN_RATING,
    get_rating_stats_for_songs,
    get_song_ratings,
    get_top_rated_songs,
    get_user_ratings,
    save_rating,
    validate_rating,
)

__all__ = [
    "MAX_RATING",
    "MIN_RATING",
    "get_rating_stats_for_songs",
    "get_song_ratings",
    "get_top_rated_songs",
    "get_user_ratings",
    "save_rating",
    "validate_rating",
]
