from collections import defaultdict
from typing import Iterable

from sqlalchemy import select, delete
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from app.files.models import Tag, FileTag


def normalize_tag(name: str | None) -> str:
    """Single normalization policy for every path that creates or looks up a tag."""
    return (name or "").strip().lower()


def normalize_tags(names: Iterable[str] | None) -> list[str]:
    out: list[str] = []
    for n in names or []:
        n = normalize_tag(n)
        if n and n not in out:
            out.append(n)
    return out


def _insert_ignore(db: Session):
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert(FileTag).on_conflict_do_nothing()
    return sqlite.insert(FileTag).on_conflict_do_nothing()


def resolve_tag_names(db: Session, file_id: int) -> list[str]:
    stmt = (
        select(Tag.name)
        .join(FileTag, FileTag.tag_id == Tag.id)
        .where(FileTag.file_id == file_id)
        .order_by(Tag.name)
    )
    return list(db.scalars(stmt))


def tag_names_by_file(db: Session, file_ids: list[int]) -> dict[int, list[str]]:
    out: dict[int, list[str]] = defaultdict(list)
    if not file_ids:
        return out
    stmt = (
        select(FileTag.file_id, Tag.name)
        .join(Tag, Tag.id == FileTag.tag_id)
        .where(FileTag.file_id.in_(file_ids))
        .order_by(FileTag.file_id, Tag.name)
    )
    for fid, name in db.execute(stmt):
        out[fid].append(name)
    return out


def get_or_create_tag(db: Session, name: str) -> Tag:
    tag = db.scalars(select(Tag).where(Tag.name == name)).first()
    if tag is None:
        tag = Tag(name=name)
        db.add(tag)
        db.flush()
    return tag


def apply_tags(db: Session, file_id: int, names: Iterable[str] | None) -> None:
    """
    Link `names` to the file, creating missing tags. Existing links are kept,
    so calling this twice yields the union. Runs one name at a time to keep tag
    creation order deterministic. Flushes only; the caller owns the commit.
    """
    for raw in names or []:
        name = normalize_tag(raw)
        if not name:
            continue
        tag = get_or_create_tag(db, name)
        db.execute(_insert_ignore(db).values(file_id=file_id, tag_id=tag.id))


def clear_tags(db: Session, file_id: int) -> None:
    db.execute(delete(FileTag).where(FileTag.file_id == file_id))


def replace_tags(db: Session, file_id: int, names: Iterable[str] | None) -> None:
    clear_tags(db, file_id)
    apply_tags(db, file_id, names)
