import logging

from sqlalchemy import select, or_, desc
from sqlalchemy.orm import Session

from app.auth.models import User
from app.files.models import File
from app.files.storage import delete_blob
from app.shared.auth import Caller, LEVELS, hash_password
from app.shared.errors import ValidationError, NotFoundError, ConflictError
from app.shared.guard import Op, authorize, can

logger = logging.getLogger(__name__)

def _taken(db: Session, username: str | None, email: str | None, exclude_id: int | None = None) -> bool:
    conds = []
    if username:
        conds.append(User.username == username)
    if email:
        conds.append(User.email == email.lower())
    if not conds:
        return False
    stmt = select(User.id).where(or_(*conds))
    if exclude_id is not None:
        stmt = stmt.where(User.id != exclude_id)
    return db.scalars(stmt).first() is not None

def list_users(db: Session) -> list[User]:
    return list(db.scalars(select(User).order_by(desc(User.created_at), desc(User.id))))

def get_user(db: Session, caller: Caller, user_id: int) -> User:
    authorize(caller, Op.USER_READ, owner_id=user_id)
    u = db.get(User, user_id)
    if not u:
        raise NotFoundError("User not found")
    return u

def create_user(db: Session, username: str | None, email: str | None, password: str | None, level: str = "user") -> User:
    username = (username or "").strip()
    if not username or not email or not password:
        raise ValidationError("Please provide username, email, and password")
    if level not in LEVELS:
        raise ValidationError("Invalid user level")
    if _taken(db, username, email):
        raise ConflictError("Username or email already exists")
    u = User(username=username, email=email.lower(), password=hash_password(password), level=level)
    db.add(u)
    db.commit()
    db.refresh(u)
    logger.info("user %s created (%s)", u.id, u.level)
    return u

def update_user(
    db: Session,
    caller: Caller,
    user_id: int,
    username: str | None = None,
    email: str | None = None,
    level: str | None = None,
) -> User:
    """Self-service edits cover username and email; only admins may change a level."""
    authorize(caller, Op.USER_UPDATE, owner_id=user_id)
    u = db.get(User, user_id)
    if not u:
        raise NotFoundError("User not found")
    if level and level not in LEVELS:
        raise ValidationError("Invalid user level")

    username = (username or "").strip() or None
    if _taken(db, username, email, exclude_id=user_id):
        raise ConflictError("Username or email already exists")

    changed = False
    if username:
        u.username = username
        changed = True
    if email:
        u.email = email.lower()
        changed = True
    if level and can(caller, Op.USER_UPDATE_ROLE):
        u.level = level
        changed = True
    if not changed:
        raise ValidationError("No valid fields to update")

    db.commit()
    db.refresh(u)
    return u

def delete_user(db: Session, caller: Caller, user_id: int) -> None:
    authorize(caller, Op.USER_DELETE, owner_id=user_id)
    u = db.get(User, user_id)
    if not u:
        raise NotFoundError("User not found")
    paths = list(db.scalars(select(File.file_path).where(File.user_id == user_id)))
    db.delete(u)  # files and their tag links cascade
    db.commit()
    for p in paths:
        delete_blob(p)
    logger.info("user %s deleted by %s (%d files removed)", user_id, caller.id, len(paths))
