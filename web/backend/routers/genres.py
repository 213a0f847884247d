from fastapi import APIRouter, Depends

from aurora_music.domain.accounts import User
from aurora_music.domain.library.genres import (
    approve_request,
    create_genre,
    delete_genre,
    get_all_genres,
    get_pending_count,
    get_pending_requests,
    get_user_requests,
    reject_request,
    submit_genre_request,
)

from ..deps import get_current_admin, get_current_user, get_db
from ..errors import domain_errors
from ..schemas import (
    GenreCreateRequest,
    GenreInfo,
    GenreRequestCreate,
    GenreRequestInfo,
)

router = APIRouter()


@router.get("/genres", response_model=list[GenreInfo])
async def list_genres(db=Depends(get_db)):
    with domain_errors("list genres"):
        return [GenreInfo.from_genre(genre) for genre in get_all_genres(db)]


@router.post("/genres", response_model=GenreInfo, status_code=201)
async def add_genre(
    request: GenreCreateRequest,
    admin: User = Depends(get_current_admin),
    db=Depends(get_db),
):
    with domain_errors("create genre"):
        return GenreInfo.from_genre(create_genre(db, request.name))


@router.delete("/genres/{genre_id}")
async def remove_genre(
    genre_id: int, admin: User = Depends(get_current_admin), db=Depends(get_db)
):
    with domain_errors(f"delete genre {genre_id}"):
        delete_genre(db, genre_id)
    return {"success": True}


# Genre requests

@router.post("/genres/requests", response_model=GenreRequestInfo, status_code=201)
async def request_genre(
    request: GenreRequestCreate,
    user: User = Depends(get_current_user),
    db=Depends(get_db),
):
    """Ask the admins to add a genre."""
    with domain_errors("submit genre request"):
        return GenreRequestInfo.from_request(
            submit_genre_request(db, user.id, request.genre_name)
        )


@router.get("/genres/requests/mine", response_model=list[GenreRequestInfo])
async def my_genre_requests(user: User = Depends(get_current_user), db=Depends(get_db)):
    with domain_errors("list genre requests"):
        return [GenreRequestInfo.from_request(r) for r in get_user_requests(db, user.id)]


@router.get("/genres/requests/pending", response_model=list[GenreRequestInfo])
async def pending_genre_requests(
    admin: User = Depends(get_current_admin), db=Depends(get_db)
):
    with domain_errors("list pending genre requests"):
        return [GenreRequestInfo.from_request(r) for r in get_pending_requests(db)]


@router.get("/genres/requests/pending/count")
async def pending_genre_request_count(
    admin: User = Depends(get_current_admin), db=Depends(get_db)
):
    """Badge count for the admin menu."""
    with domain_errors("count pending genre requests"):
        return {"count": get_pending_count(db)}


@router.post("/genres/requests/{request_id}/approve", response_model=GenreRequestInfo)
async def approve_genre_request(
    request_id: int, admin: User = Depends(get_current_admin), db=Depends(get_db)
):
    with domain_errors(f"approve genre request {request_id}"):
        return GenreRequestInfo.from_request(approve_request(db, request_id, admin.id))


@router.post("/genres/requests/{request_id}/reject", response_model=GenreRequestInfo)
async def reject_genre_request(
    request_id: int, admin: User = Depends(get_current_admin), db=Depends(get_db)
):
    with domain_errors(f"reject genre request {request_id}"):
        return GenreRequestInfo.from_request(reject_request(db, request_id, admin.id))
