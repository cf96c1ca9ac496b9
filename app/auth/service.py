from sqlalchemy import select
from sqlalchemy.orm import Session
from app.auth.models import User
from app.shared.auth import create_access_token, verify_password
from app.shared.errors import ValidationError, NotFoundError
from app.users.service import create_user

def _public(u: User) -> dict:
    return {"id": u.id, "username": u.username, "email": u.email, "level": u.level}

def register_user(db: Session, username: str | None, email: str | None, password: str | None) -> dict:
    u = create_user(db, username, email, password, level="user")
    token = create_access_token(sub=str(u.id), role=u.level)
    return {"token": token, "user": _public(u)}

def authenticate_user(db: Session, email: str | None, password: str | None) -> dict:
    if not email or not password:
        raise ValidationError("Please enter all fields")
    u = db.scalars(select(User).where(User.email == email.lower().strip())).first()
    if not u or not verify_password(password, u.password):
        raise ValidationError("Invalid credentials")
    token = create_access_token(sub=str(u.id), role=u.level)
    return {"token": token, "user": _public(u)}

def current_user(db: Session, user_id: int) -> dict:
    u = db.get(User, user_id)
    if not u:
        raise NotFoundError("User not found")
    return _public(u)
