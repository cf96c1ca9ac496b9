import logging
import mimetypes
import random
import time
from pathlib import Path
from typing import Tuple

from fastapi import UploadFile

from app.shared.config import settings
from app.shared.errors import ValidationError, StorageError

logger = logging.getLogger(__name__)

# Resolve a safe, writable storage path
UPLOADS_DIR = Path(settings.UPLOAD_DIR).resolve()
UPLOADS_DIR.mkdir(parents=True, exist_ok=True)

# Limits
MAX_BYTES = settings.MAX_UPLOAD_MB * 1024 * 1024
CHUNK = 1024 * 1024

ALLOWED_MIME = "application/pdf"

def sniff_mime(filename: str, fallback: str | None) -> str:
    guess, _ = mimetypes.guess_type(filename)
    return fallback or guess or "application/octet-stream"

def is_allowed(filename: str, content_type: str | None) -> bool:
    return sniff_mime(filename, content_type).lower() == ALLOWED_MIME

def _unique_name() -> str:
    # always .pdf: /uploads derives Content-Type from the suffix
    return f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}.pdf"

async def save_upload(file: UploadFile) -> Tuple[Path, int, str]:
    """
    Save to disk under UPLOAD_DIR and return (path, size, mime).
    Raises ValidationError with user-friendly messages on validation errors.
    """
    fname = Path(file.filename or "upload.pdf").name
    if not is_allowed(fname, file.content_type):
        raise ValidationError("Only PDF files are allowed")

    target = UPLOADS_DIR / _unique_name()
    size = 0

    try:
        with target.open("wb") as out:
            while True:
                chunk = await file.read(CHUNK)
                if not chunk:
                    break
                size += len(chunk)
                if size > MAX_BYTES:
                    out.close()
                    target.unlink(missing_ok=True)
                    raise ValidationError(f"File too large. Max {settings.MAX_UPLOAD_MB} MB")
                out.write(chunk)
    except OSError as e:
        logger.error("could not write upload %s: %s", target, e)
        target.unlink(missing_ok=True)
        raise StorageError("Server error")

    await file.close()
    return target, size, ALLOWED_MIME

def delete_blob(path: str | Path) -> bool:
    """Best effort: a missing or undeletable blob is logged, never raised."""
    try:
        Path(path).unlink()
        return True
    except OSError as e:
        logger.warning("Error deleting file from filesystem: %s (%s)", path, e)
        return False

def public_url(path: str | Path) -> str:
    return f"{settings.PUBLIC_BASE_URL.rstrip('/')}/uploads/{Path(path).name}"
