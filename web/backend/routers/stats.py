from fastapi import APIRouter, Depends

from aurora_music.domain.accounts import get_user
from aurora_music.domain.library.stats import get_genre_usage_for_user, get_site_stats

from ..deps import get_db
from ..errors import domain_errors
from ..schemas import GenreUsage, SiteStatsResponse

router = APIRouter()


@router.get("/stats", response_model=SiteStatsResponse)
async def site_stats(db=Depends(get_db)):
    """Totals for the home page: songs, users, playlists, and plays."""
    with domain_errors("load site stats"):
        return SiteStatsResponse.from_stats(get_site_stats(db))


@router.get("/stats/users/{user_id}/genres", response_model=list[GenreUsage])
async def user_genre_usage(user_id: int, db=Depends(get_db)):
    """How often each genre appears across a user's playlists, most used first."""
    with domain_errors(f"load genre usage for user {user_id}"):
        get_user(db, user_id)
        return [GenreUsage(**row) for row in get_genre_usage_for_user(db, user_id)]
