from fastapi import APIRouter, Depends

from aurora_music.domain.accounts import (
    User,
    create_user,
    delete_user,
    get_user,
    list_users,
    set_admin,
)

from ..deps import get_current_admin, get_db
from ..errors import domain_errors
from ..schemas import AdminStatusRequest, UserCreateRequest, UserInfo

router = APIRouter()


@router.post("/users", response_model=UserInfo, status_code=201)
async def register_user(request: UserCreateRequest, db=Depends(get_db)):
    """Create an owner identity. There is no password or login.

    Admin rights are granted only by another admin or ``aurora-music create-user --admin``.
    """
    with domain_errors("create user"):
        return UserInfo.from_user(create_user(db, request.username))


@router.get("/users", response_model=list[UserInfo])
async def all_users(admin: User = Depends(get_current_admin), db=Depends(get_db)):
    with domain_errors("list users"):
        return [UserInfo.from_user(user) for user in list_users(db)]


@router.get("/users/{user_id}", response_model=UserInfo)
async def user_detail(user_id: int, db=Depends(get_db)):
    with domain_errors(f"load user {user_id}"):
        return UserInfo.from_user(get_user(db, user_id))


@router.delete("/users/{user_id}")
async def remove_user(
    user_id: int, admin: User = Depends(get_current_admin), db=Depends(get_db)
):
    """Delete a user and everything they own (admin only, never yourself)."""
    with domain_errors(f"delete user {user_id}"):
        delete_user(db, user_id, acting_admin=admin)
    return {"success": True}


@router.post("/users/{user_id}/admin", response_model=UserInfo)
async def change_admin_status(
    user_id: int,
    request: AdminStatusRequest,
    admin: User = Depends(get_current_admin),
    db=Depends(get_db),
):
    with domain_errors(f"update admin status for user {user_id}"):
        return UserInfo.from_user(
            set_admin(db, user_id, request.is_admin, acting_admin=admin)
        )
