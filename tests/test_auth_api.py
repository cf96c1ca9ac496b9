from app.auth.models import User
from app.auth.seed import ensure_admin
from app.shared.auth import verify_password


def test_register_login_and_me(client):
    r = client.post("/api/auth/register", json={"username": "ann", "email": "Ann@example.com", "password": "pw123"})
    assert r.status_code == 201
    assert r.json()["user"]["level"] == "user"

    r = client.post("/api/auth/login", json={"email": "ann@example.com", "password": "pw123"})
    assert r.status_code == 200
    token = r.json()["token"]

    me = client.get("/api/auth/user", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["username"] == "ann" and me.json()["email"] == "ann@example.com"


def test_register_duplicate_and_missing_fields(client):
    client.post("/api/auth/register", json={"username": "ann", "email": "ann@example.com", "password": "pw"})
    assert client.post("/api/auth/register", json={"username": "ann2", "email": "ann@example.com", "password": "pw"}).status_code == 409
    assert client.post("/api/auth/register", json={"username": "ann3"}).status_code == 400


def test_login_rejects_bad_credentials(client):
    client.post("/api/auth/register", json={"username": "ann", "email": "ann@example.com", "password": "pw"})
    r = client.post("/api/auth/login", json={"email": "ann@example.com", "password": "nope"})
    assert r.status_code == 400 and r.json()["message"] == "Invalid credentials"
    assert client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "pw"}).status_code == 400
    assert client.post("/api/auth/login", json={}).status_code == 400


def test_registered_user_can_upload(client):
    r = client.post("/api/auth/register", json={"username": "ann", "email": "ann@example.com", "password": "pw"})
    h = {"Authorization": f"Bearer {r.json()['token']}"}
    up = client.post("/api/files", headers=h, files={"file": ("a.pdf", b"%PDF-1.4", "application/pdf")})
    assert up.status_code == 201


def test_seed_admin_is_insert_or_ignore(db):
    assert ensure_admin(db, "admin", "Admin@example.com", "admin123") is True
    assert ensure_admin(db, "admin", "admin@example.com", "other") is False
    admins = db.query(User).filter(User.level == "admin").all()
    assert len(admins) == 1
    assert verify_password("admin123", admins[0].password)


def test_register_response_shape(client):
    r = client.post("/api/auth/register", json={"username": "ann", "email": "ann@example.com", "password": "pw"})
    assert set(r.json()) == {"token", "user"}
    assert set(r.json()["user"]) == {"id", "username", "email", "level"}


def test_register_rejects_overlong_password(client):
    r = client.post("/api/auth/register", json={"username": "ann", "email": "ann@example.com", "password": "p" * 80})
    assert r.status_code == 400
    assert "72 bytes" in r.json()["message"]
    ok = client.post("/api/auth/register", json={"username": "ann", "email": "ann@example.com", "password": "p" * 72})
    assert ok.status_code == 201
    r = client.post("/api/auth/login", json={"email": "ann@example.com", "password": "p" * 80})
    assert r.status_code == 400 and r.json()["message"] == "Invalid credentials"
