import logging
from pathlib import Path

from fastapi import UploadFile
from sqlalchemy import delete
from sqlalchemy.orm import Session

from app.files.models import File, FileTag
from app.files.query import get_visible_file, list_visible_files
from app.files.schemas import FileOut, FileMinimalOut
from app.files.storage import save_upload, delete_blob, public_url
from app.files.tagging import apply_tags, replace_tags, resolve_tag_names
from app.shared.auth import Caller
from app.shared.errors import NotFoundError
from app.shared.guard import Op, authorize, minimal_view

logger = logging.getLogger(__name__)


def serialize_file(caller: Caller, f: File, tags: list[str]) -> FileOut | FileMinimalOut:
    url = public_url(f.file_path)
    if minimal_view(caller):
        return FileMinimalOut(id=f.id, name=f.name, file_path=f.file_path, created_at=f.created_at, url=url)
    return FileOut(
        id=f.id,
        name=f.name,
        description=f.description,
        file_path=f.file_path,
        file_type=f.file_type,
        size=f.size,
        user_id=f.user_id,
        created_at=f.created_at,
        url=url,
        tags=tags,
    )


def list_files(db: Session, caller: Caller, search: str | None = None, tags: list[str] | None = None):
    return [serialize_file(caller, f, t) for f, t in list_visible_files(db, caller, search, tags)]


def _require_file(db: Session, caller: Caller, file_id: int, op: Op) -> File:
    f = get_visible_file(db, caller, file_id, op)
    if not f:
        raise NotFoundError("File not found")
    authorize(caller, op, owner_id=f.user_id)
    return f


def get_file(db: Session, caller: Caller, file_id: int) -> FileOut | FileMinimalOut:
    f = _require_file(db, caller, file_id, Op.FILE_READ)
    tags = [] if minimal_view(caller) else resolve_tag_names(db, f.id)
    return serialize_file(caller, f, tags)


def get_file_blob(db: Session, caller: Caller, file_id: int) -> File:
    f = _require_file(db, caller, file_id, Op.FILE_READ)
    if not Path(f.file_path).is_file():
        raise NotFoundError("File missing in storage")
    return f


async def create_file(
    db: Session,
    caller: Caller,
    upload: UploadFile,
    name: str | None = None,
    description: str | None = None,
    tags: list[str] | None = None,
) -> FileOut:
    """
    Store the blob, insert the row, attach tags, then commit once.
    Anything failing after the blob is written rolls the row back and removes the blob.
    """
    authorize(caller, Op.FILE_CREATE)
    path, size, mime = await save_upload(upload)
    try:
        rec = File(
            name=(name or "").strip() or Path(upload.filename or "upload.pdf").name,
            description=description or "",
            file_path=str(path),
            file_type=mime,
            size=size,
            user_id=caller.id,
        )
        db.add(rec)
        db.flush()
        apply_tags(db, rec.id, tags)
        db.commit()
    except Exception:
        db.rollback()
        delete_blob(path)
        raise
    db.refresh(rec)
    logger.info("file %s uploaded by user %s (%d bytes)", rec.id, caller.id, size)
    return serialize_file(caller, rec, resolve_tag_names(db, rec.id))


def update_file(
    db: Session,
    caller: Caller,
    file_id: int,
    name: str | None = None,
    description: str | None = None,
    tags: list[str] | None = None,
) -> FileOut:
    f = _require_file(db, caller, file_id, Op.FILE_UPDATE)
    f.name = name or f.name
    f.description = description or f.description
    replace_tags(db, f.id, tags or [])
    db.commit()
    db.refresh(f)
    logger.info("file %s updated by user %s", f.id, caller.id)
    return serialize_file(caller, f, resolve_tag_names(db, f.id))


def delete_file(db: Session, caller: Caller, file_id: int) -> None:
    f = _require_file(db, caller, file_id, Op.FILE_DELETE)
    delete_blob(f.file_path)
    db.execute(delete(FileTag).where(FileTag.file_id == f.id))
    db.delete(f)
    db.commit()
    logger.info("file %s deleted by user %s", file_id, caller.id)
