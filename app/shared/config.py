# app/shared/config.py
from pathlib import Path
from pydantic import BaseModel
import os

ROOT = Path(__file__).resolve().parents[2]   # project root
STORAGE_DIR = ROOT / "storage"

class Settings(BaseModel):
    ENV: str = os.getenv("ENV", "dev")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # persistence
    DB_URL: str = os.getenv("DB_URL", f"sqlite:///{(STORAGE_DIR / 'pdfshare.db').as_posix()}")
    UPLOAD_DIR: str = os.getenv("UPLOAD_DIR", str(STORAGE_DIR / "uploads"))
    PUBLIC_BASE_URL: str = os.getenv("PUBLIC_BASE_URL", "http://localhost:8000")
    MAX_UPLOAD_MB: int = int(os.getenv("MAX_UPLOAD_MB", "50"))

    # JWT settings
    JWT_KEY: str = os.getenv("JWT_KEY", "dev-secret")
    JWT_ALG: str = os.getenv("JWT_ALG", "HS256")
    JWT_ISS: str | None = os.getenv("JWT_ISS")
    JWT_AUD: str | None = os.getenv("JWT_AUD")
    JWT_EXPIRE_MIN: int = int(os.getenv("JWT_EXPIRE_MIN", "60"))

    # bootstrap admin (python -m app.auth.seed)
    ADMIN_USERNAME: str = os.getenv("ADMIN_USERNAME", "admin")
    ADMIN_EMAIL: str = os.getenv("ADMIN_EMAIL", "admin@example.com")
    ADMIN_PASSWORD: str = os.getenv("ADMIN_PASSWORD", "admin123")

settings = Settings()
