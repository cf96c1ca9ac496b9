from datetime import datetime, timezone
from typing import TYPE_CHECKING
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import String, DateTime, Integer, CheckConstraint
from app.shared.db import Base

if TYPE_CHECKING:
    from app.files.models import File

class User(Base):
    __tablename__ = "users"
    __table_args__ = (CheckConstraint("level IN ('admin', 'user', 'viewer')", name="ck_users_level"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(80), unique=True, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    password: Mapped[str] = mapped_column(String(255))  # bcrypt hash
    level: Mapped[str] = mapped_column(String(16), default="user")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    # One user -> many files; rows go with the user via ON DELETE CASCADE
    files: Mapped[list["File"]] = relationship(
        back_populates="owner", cascade="all, delete-orphan", passive_deletes=True
    )
