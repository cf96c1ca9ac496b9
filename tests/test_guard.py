import pytest

from app.shared.auth import Caller
from app.shared.errors import AuthorizationError
from app.shared.guard import Op, ANY, OWN, authorize, can, scope_for, minimal_view

ADMIN = Caller(id=1, level="admin")
USER = Caller(id=2, level="user")
VIEWER = Caller(id=3, level="viewer")


def test_admin_may_do_everything():
    for op in Op:
        assert can(ADMIN, op, owner_id=99)


def test_user_scoped_to_own_files():
    assert scope_for(USER, Op.FILE_LIST) == OWN
    assert can(USER, Op.FILE_CREATE)
    assert can(USER, Op.FILE_UPDATE, owner_id=USER.id)
    assert not can(USER, Op.FILE_UPDATE, owner_id=ADMIN.id)
    assert not can(USER, Op.FILE_DELETE, owner_id=ADMIN.id)


@pytest.mark.parametrize("op", [Op.TAG_CREATE, Op.TAG_RENAME, Op.TAG_DELETE, Op.TAG_USAGE, Op.USER_LIST, Op.USER_CREATE])
def test_user_denied_admin_operations(op):
    with pytest.raises(AuthorizationError):
        authorize(USER, op)


def test_user_self_update_but_not_role():
    assert can(USER, Op.USER_UPDATE, owner_id=USER.id)
    assert not can(USER, Op.USER_UPDATE, owner_id=ADMIN.id)
    assert not can(USER, Op.USER_UPDATE_ROLE)


@pytest.mark.parametrize("op", [Op.FILE_CREATE, Op.FILE_UPDATE, Op.FILE_DELETE, Op.TAG_CREATE, Op.USER_UPDATE, Op.USER_DELETE])
def test_viewer_denied_mutations(op):
    with pytest.raises(AuthorizationError):
        authorize(VIEWER, op, owner_id=VIEWER.id)


def test_viewer_reads_everything_minimally():
    assert scope_for(VIEWER, Op.FILE_LIST) == ANY
    assert can(VIEWER, Op.FILE_READ, owner_id=ADMIN.id)
    assert minimal_view(VIEWER)
    assert not minimal_view(USER) and not minimal_view(ADMIN)


def test_self_delete_always_denied():
    for caller in (ADMIN, USER, VIEWER):
        assert not can(caller, Op.USER_DELETE, owner_id=caller.id)
    with pytest.raises(AuthorizationError) as e:
        authorize(ADMIN, Op.USER_DELETE, owner_id=ADMIN.id)
    assert "own account" in e.value.message


def test_unknown_level_gets_nothing():
    ghost = Caller(id=9, level="guest")
    assert not any(can(ghost, op) for op in Op)
