import json
import os
import tempfile
from pathlib import Path

import pytest

# Point the app at a throwaway store before anything under app/ is imported
_TMP = Path(tempfile.mkdtemp(prefix="pdfshare-tests-"))
os.environ["DB_URL"] = f"sqlite:///{(_TMP / 'test.db').as_posix()}"
os.environ["UPLOAD_DIR"] = str(_TMP / "uploads")
os.environ["PUBLIC_BASE_URL"] = "http://testserver"
os.environ["MAX_UPLOAD_MB"] = "1"

from fastapi.testclient import TestClient  # noqa: E402

from app.main import app  # noqa: E402
from app.shared import auth as auth_module  # noqa: E402
from app.shared.auth import Caller, create_access_token  # noqa: E402
from app.shared.db import Base, SessionLocal, engine, init_db  # noqa: E402
from app.users.service import create_user  # noqa: E402

# cheap hashing keeps fixture users fast
auth_module.BCRYPT_ROUNDS = 4

PDF_BYTES = b"%PDF-1.4\n1 0 obj<<>>endobj\ntrailer<<>>\n%%EOF\n"


@pytest.fixture(autouse=True)
def _fresh_schema():
    Base.metadata.drop_all(bind=engine)
    init_db()
    yield


@pytest.fixture
def db():
    s = SessionLocal()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def make_user(db):
    """Create a user and return (Caller, auth headers)."""
    def _make(username: str, level: str = "user"):
        u = create_user(db, username, f"{username}@example.com", "secret123", level)
        token = create_access_token(sub=str(u.id), role=u.level)
        return Caller(id=u.id, level=u.level), {"Authorization": f"Bearer {token}"}
    return _make


@pytest.fixture
def upload(client):
    """Upload a PDF through the API and return the JSON body."""
    def _upload(headers, name="doc.pdf", description="", tags=None, content=PDF_BYTES):
        data = {"name": name, "description": description, "tags": json.dumps(tags or [])}
        r = client.post(
            "/api/files",
            headers=headers,
            data=data,
            files={"file": (name, content, "application/pdf")},
        )
        assert r.status_code == 201, r.text
        return r.json()
    return _upload
