"""Create the bootstrap admin account: ``python -m app.auth.seed``."""
import logging

from sqlalchemy import select, or_
from sqlalchemy.orm import Session

from app.auth.models import User
from app.shared.auth import hash_password
from app.shared.config import settings
from app.shared.db import SessionLocal, init_db

logger = logging.getLogger(__name__)

def ensure_admin(db: Session, username: str, email: str, password: str) -> bool:
    """Insert the admin unless the username or email is already taken. True if created."""
    exists = db.scalars(
        select(User.id).where(or_(User.username == username, User.email == email.lower()))
    ).first()
    if exists is not None:
        return False
    db.add(User(username=username, email=email.lower(), password=hash_password(password), level="admin"))
    db.commit()
    return True

def main():
    logging.basicConfig(level=settings.LOG_LEVEL)
    init_db()
    db = SessionLocal()
    try:
        created = ensure_admin(db, settings.ADMIN_USERNAME, settings.ADMIN_EMAIL, settings.ADMIN_PASSWORD)
    finally:
        db.close()
    if created:
        logger.info("Admin user %s created", settings.ADMIN_USERNAME)
    else:
        logger.info("Admin user %s already exists", settings.ADMIN_USERNAME)

if __name__ == "__main__":
    main()
