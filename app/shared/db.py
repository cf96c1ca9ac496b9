from pathlib import Path
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from app.shared.config import settings

# Local SQLite DB under ./storage/ by default (directory created if missing)
if settings.DB_URL.startswith("sqlite:///"):
    Path(settings.DB_URL[len("sqlite:///"):]).parent.mkdir(parents=True, exist_ok=True)

_connect_args = {"check_same_thread": False} if settings.DB_URL.startswith("sqlite") else {}
engine = create_engine(settings.DB_URL, connect_args=_connect_args)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)

@event.listens_for(engine, "connect")
def _sqlite_fk_on(dbapi_conn, _record):
    # SQLite ignores ON DELETE CASCADE unless asked per connection
    if engine.dialect.name == "sqlite":
        cur = dbapi_conn.cursor()
        cur.execute("PRAGMA foreign_keys=ON")
        cur.close()

class Base(DeclarativeBase):
    pass

# FastAPI dep
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def init_db():
    # import models so they register with Base.metadata
    from app.auth import models as auth_models  # noqa: F401
    from app.files import models as files_models  # noqa: F401
    Base.metadata.create_all(bind=engine)
