import logging

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from app.files.models import File, Tag, FileTag
from app.files.tagging import normalize_tag
from app.shared.errors import ValidationError, NotFoundError, ConflictError
from app.tags.schemas import TagUsageOut

logger = logging.getLogger(__name__)

def _clean_name(name: str | None) -> str:
    clean = normalize_tag(name)
    if not clean:
        raise ValidationError("Tag name is required")
    return clean

def _find_by_name(db: Session, name: str, exclude_id: int | None = None) -> Tag | None:
    stmt = select(Tag).where(func.lower(Tag.name) == name)
    if exclude_id is not None:
        stmt = stmt.where(Tag.id != exclude_id)
    return db.scalars(stmt).first()

def usage_count(db: Session, tag_id: int) -> int:
    return db.scalar(select(func.count()).select_from(FileTag).where(FileTag.tag_id == tag_id)) or 0

def list_names(db: Session) -> list[str]:
    return list(db.scalars(select(Tag.name).distinct().order_by(Tag.name)))

def list_with_usage(db: Session) -> list[TagUsageOut]:
    stmt = (
        select(Tag.id, Tag.name, File.name)
        .outerjoin(FileTag, FileTag.tag_id == Tag.id)
        .outerjoin(File, File.id == FileTag.file_id)
        .order_by(Tag.name, File.id)
    )
    out: dict[int, TagUsageOut] = {}
    for tag_id, tag_name, file_name in db.execute(stmt):
        row = out.setdefault(tag_id, TagUsageOut(id=tag_id, name=tag_name, usage_count=0))
        if file_name is not None:
            row.usage_count += 1
            row.files.append(file_name)
    return list(out.values())

def create_tag(db: Session, name: str | None) -> Tag:
    clean = _clean_name(name)
    if _find_by_name(db, clean):
        raise ConflictError("Tag already exists")
    tag = Tag(name=clean)
    db.add(tag)
    db.commit()
    db.refresh(tag)
    logger.info("tag %s created (%s)", tag.id, tag.name)
    return tag

def rename_tag(db: Session, tag_id: int, name: str | None) -> Tag:
    clean = _clean_name(name)
    tag = db.get(Tag, tag_id)
    if not tag:
        raise NotFoundError("Tag not found")
    if _find_by_name(db, clean, exclude_id=tag_id):
        raise ConflictError("Tag name already exists")
    tag.name = clean
    db.commit()
    db.refresh(tag)
    logger.info("tag %s renamed to %s", tag.id, tag.name)
    return tag

def delete_tag(db: Session, tag_id: int) -> None:
    tag = db.get(Tag, tag_id)
    if not tag:
        raise NotFoundError("Tag not found")
    used = usage_count(db, tag_id)
    if used > 0:
        raise ConflictError("Cannot delete tag that is in use", usage_count=used)
    db.delete(tag)
    db.commit()
    logger.info("tag %s deleted", tag_id)
