from enum import Enum

from fastapi import Depends

from app.shared.auth import Caller, get_caller
from app.shared.errors import AuthorizationError


class Op(str, Enum):
    FILE_LIST = "file:list"
    FILE_READ = "file:read"
    FILE_CREATE = "file:create"
    FILE_UPDATE = "file:update"
    FILE_DELETE = "file:delete"
    TAG_LIST = "tag:list"
    TAG_USAGE = "tag:usage"
    TAG_CREATE = "tag:create"
    TAG_RENAME = "tag:rename"
    TAG_DELETE = "tag:delete"
    USER_LIST = "user:list"
    USER_READ = "user:read"
    USER_CREATE = "user:create"
    USER_UPDATE = "user:update"
    USER_UPDATE_ROLE = "user:update_role"
    USER_DELETE = "user:delete"


# Scope rules: ANY reaches every resource, OWN only resources owned by the caller
# (for user:* operations "owned" means the caller's own record).
ANY = "any"
OWN = "own"

POLICY: dict[str, dict[Op, str]] = {
    "admin": {op: ANY for op in Op},
    "user": {
        Op.FILE_LIST: OWN,
        Op.FILE_READ: OWN,
        Op.FILE_CREATE: ANY,
        Op.FILE_UPDATE: OWN,
        Op.FILE_DELETE: OWN,
        Op.TAG_LIST: ANY,
        Op.USER_READ: OWN,
        Op.USER_UPDATE: OWN,
    },
    "viewer": {
        Op.FILE_LIST: ANY,
        Op.FILE_READ: ANY,
        Op.TAG_LIST: ANY,
        Op.USER_READ: OWN,
    },
}

_DENIED = {
    Op.TAG_USAGE: "Access denied. Admin only.",
    Op.TAG_CREATE: "Access denied. Admin only.",
    Op.TAG_RENAME: "Access denied. Admin only.",
    Op.TAG_DELETE: "Access denied. Admin only.",
    Op.USER_LIST: "Admin access required",
    Op.USER_CREATE: "Admin access required",
    Op.USER_DELETE: "Admin access required",
}


def scope_for(caller: Caller, op: Op) -> str | None:
    """ANY, OWN, or None when the caller's role may not perform `op` at all."""
    return POLICY.get(caller.level, {}).get(op)


def can(caller: Caller, op: Op, owner_id: int | None = None) -> bool:
    if op is Op.USER_DELETE and owner_id is not None and owner_id == caller.id:
        return False
    scope = scope_for(caller, op)
    if scope is None:
        return False
    if scope == OWN and owner_id is not None:
        return owner_id == caller.id
    return True


def authorize(caller: Caller, op: Op, owner_id: int | None = None) -> None:
    """
    Raise AuthorizationError unless `caller` may perform `op`.
    With owner_id=None only the role is checked; services call again once the
    target resource (and therefore its owner) is known.
    """
    if op is Op.USER_DELETE and owner_id == caller.id:
        raise AuthorizationError("Cannot delete your own account")
    if not can(caller, op, owner_id):
        raise AuthorizationError(_DENIED.get(op, "Access denied"))


def minimal_view(caller: Caller) -> bool:
    # viewers get the reduced projection and cannot search or filter by tag
    return caller.level == "viewer"


def guard_gate(op: Op):
    """
    Use as a FastAPI dependency on endpoints. Resolves the caller and rejects
    roles that can never perform `op`, before the handler touches the store.
    """
    def _dep(caller: Caller = Depends(get_caller)) -> Caller:
        authorize(caller, op)
        return caller
    return _dep
