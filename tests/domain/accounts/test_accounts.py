"""Tests for user records and admin checks."""

import pytest

from aurora_music.domain.accounts import (
    create_user,
    delete_user,
    get_user,
    list_users,
    require_admin,
    set_admin,
)
from aurora_music.domain.library.exceptions import (
    DuplicateError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)


def test_create_and_get(db):
    user = create_user(db, "  mira ")
    assert user.username == "mira"
    assert user.is_admin is False
    assert get_user(db, user.id) == user


def test_blank_username(db):
    with pytest.raises(ValidationError):
        create_user(db, "  ")


def test_duplicate_username(db):
    create_user(db, "mira")
    with pytest.raises(DuplicateError):
        create_user(db, "mira")


def test_missing_user(db):
    with pytest.raises(NotFoundError, match="User 5 not found"):
        get_user(db, 5)


def test_require_admin(db):
    admin = create_user(db, "root", is_admin=True)
    listener = create_user(db, "listener")

    assert require_admin(db, admin.id) == admin
    with pytest.raises(PermissionDeniedError):
        require_admin(db, listener.id)


@pytest.fixture
def admin(db):
    return create_user(db, "root", is_admin=True)


def test_list_users_sorted_by_name(db, admin):
    create_user(db, "zed")
    create_user(db, "Anna")
    assert [u.username for u in list_users(db)] == ["Anna", "root", "zed"]


def test_set_admin_grants_and_revokes(db, admin):
    listener = create_user(db, "listener")

    assert set_admin(db, listener.id, True, acting_admin=admin).is_admin is True
    assert require_admin(db, listener.id).id == listener.id

    assert set_admin(db, listener.id, False, acting_admin=admin).is_admin is False


def test_set_admin_rejects_self(db, admin):
    with pytest.raises(ValidationError, match="own admin status"):
        set_admin(db, admin.id, False, acting_admin=admin)
    assert get_user(db, admin.id).is_admin is True


def test_set_admin_unknown_user(db, admin):
    with pytest.raises(NotFoundError):
        set_admin(db, 404, True, acting_admin=admin)


def test_delete_user_cascades(db, admin):
    listener = create_user(db, "listener")
    with db:
        db.execute(
            "INSERT INTO playlists (name, owner_id, is_public) VALUES ('Mine', ?, 0)",
            (listener.id,),
        )

    delete_user(db, listener.id, acting_admin=admin)

    with pytest.raises(NotFoundError):
        get_user(db, listener.id)
    count = db.execute("SELECT COUNT(*) FROM playlists").fetchone()[0]
    assert count == 0


def test_delete_user_rejects_self(db, admin):
    with pytest.raises(ValidationError, match="cannot delete yourself"):
        delete_user(db, admin.id, acting_admin=admin)
    assert get_user(db, admin.id) == admin


def test_delete_unknown_user(db, admin):
    with pytest.raises(NotFoundError):
        delete_user(db, 404, acting_admin=admin)
