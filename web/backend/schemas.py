import time
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from aurora_music.domain.accounts import User
from aurora_music.domain.library.models import (
    Genre,
    GenreRequest,
    RatedTrack,
    SiteStats,
    Track,
)
from aurora_music.domain.playback import PlaybackSnapshot


class CamelModel(BaseModel):
    """Accepts snake_case or camelCase input, serializes as camelCase."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Songs

class TrackInfo(CamelModel):
    id: int
    title: str
    duration: float = 0.0
    owner_id: Optional[int] = None
    uploaded_at: Optional[str] = None
    plays: int = 0
    genres: list[str] = []

    @classmethod
    def from_track(cls, track: Track) -> "TrackInfo":
        return cls(
            id=track.id,
            title=track.title,
            duration=track.duration,
            owner_id=track.owner_id,
            uploaded_at=track.uploaded_at,
            plays=track.plays,
            genres=list(track.genres),
        )


class RatedTrackInfo(TrackInfo):
    average_rating: float
    rating_count: int

    @classmethod
    def from_rated(cls, rated: RatedTrack) -> "RatedTrackInfo":
        info = TrackInfo.from_track(rated.track)
        return cls(
            **info.model_dump(),
            average_rating=rated.average_rating,
            rating_count=rated.rating_count,
        )


class SongGenresRequest(CamelModel):
    genre_ids: list[int]


class RatingRequest(CamelModel):
    rating: int


class RatingEntry(CamelModel):
    id: int
    user_id: int
    song_id: int
    rating: int
    rated_at: Optional[str] = None


class SongRatingsResponse(CamelModel):
    song_id: int
    average_rating: Optional[float] = None
    rating_count: int = 0
    ratings: list[RatingEntry] = []


# Player

class PlayerState(CamelModel):
    """Snapshot of one session's queue and transport state."""

    queue: list[TrackInfo] = []
    cursor: Optional[int] = None
    current_track: Optional[TrackInfo] = None
    is_playing: bool = False
    elapsed_seconds: float = 0.0
    volume: float
    server_time: float = 0  # For client clock sync

    @classmethod
    def from_snapshot(cls, snapshot: PlaybackSnapshot) -> "PlayerState":
        current = snapshot.current_track
        return cls(
            queue=[TrackInfo.from_track(track) for track in snapshot.queue],
            cursor=snapshot.cursor,
            current_track=TrackInfo.from_track(current) if current else None,
            is_playing=snapshot.is_playing,
            elapsed_seconds=snapshot.elapsed_seconds,
            volume=snapshot.volume,
            server_time=time.time(),
        )


class SongIdRequest(CamelModel):
    song_id: int


class SeekRequest(CamelModel):
    seconds: float = Field(ge=0)


class VolumeRequest(CamelModel):
    volume: float


# Genres

class GenreInfo(CamelModel):
    id: int
    name: str

    @classmethod
    def from_genre(cls, genre: Genre) -> "GenreInfo":
        return cls(id=genre.id, name=genre.name)


class GenreCreateRequest(CamelModel):
    name: str


class GenreRequestCreate(CamelModel):
    genre_name: str


class GenreRequestInfo(CamelModel):
    id: int
    user_id: int
    genre_name: str
    status: str
    requested_at: Optional[str] = None
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[str] = None

    @classmethod
    def from_request(cls, request: GenreRequest) -> "GenreRequestInfo":
        return cls(**request._asdict())


# Playlists

class PlaylistInfo(CamelModel):
    id: int
    name: str
    owner_id: int
    is_public: bool
    created_at: Optional[str] = None
    song_count: int = 0


class PlaylistCreateRequest(CamelModel):
    name: str
    is_public: bool = False


class PlaylistUpdateRequest(CamelModel):
    name: Optional[str] = None
    is_public: Optional[bool] = None


class PlaylistMoveRequest(CamelModel):
    from_position: int
    to_position: int


# Stats

class SiteStatsResponse(CamelModel):
    total_songs: int
    total_users: int
    total_playlists: int
    total_plays: int

    @classmethod
    def from_stats(cls, stats: SiteStats) -> "SiteStatsResponse":
        return cls(**stats._asdict())


class GenreUsage(CamelModel):
    genre_id: int
    genre_name: str
    count: int


# Users

class UserCreateRequest(CamelModel):
    """Self-registration; new users are never admins."""

    username: str


class AdminStatusRequest(CamelModel):
    is_admin: bool


class UserInfo(CamelModel):
    id: int
    username: str
    is_admin: bool = False
    created_at: Optional[str] = None

    @classmethod
    def from_user(cls, user: User) -> "UserInfo":
        return cls(**user._asdict())
