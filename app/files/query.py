from sqlalchemy import select, or_, Select
from sqlalchemy.orm import Session

from app.files.models import File
from app.files.tagging import normalize_tags, tag_names_by_file
from app.shared.auth import Caller
from app.shared.guard import Op, OWN, authorize, scope_for, minimal_view


def _like_term(search: str) -> str:
    escaped = search.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def scoped_files(caller: Caller, op: Op = Op.FILE_LIST) -> Select:
    """Base row set for `caller`: every file, or only their own when the policy says OWN."""
    authorize(caller, op)
    stmt = select(File)
    if scope_for(caller, op) == OWN:
        stmt = stmt.where(File.user_id == caller.id)
    return stmt


def list_visible_files(
    db: Session,
    caller: Caller,
    search: str | None = None,
    tags: list[str] | None = None,
) -> list[tuple[File, list[str]]]:
    """
    Files `caller` may see, in primary key order, each paired with its tag names.
    Viewers get the unfiltered visible set: search and tag filters are ignored.
    """
    stmt = scoped_files(caller)
    filtering = not minimal_view(caller)

    if search and search.strip() and filtering:
        like = _like_term(search)
        stmt = stmt.where(or_(File.name.ilike(like, escape="\\"), File.description.ilike(like, escape="\\")))

    files = list(db.scalars(stmt.order_by(File.id)))
    names = tag_names_by_file(db, [f.id for f in files])
    rows = [(f, names.get(f.id, [])) for f in files]

    wanted = normalize_tags(tags) if filtering else []
    if wanted:
        rows = [(f, t) for f, t in rows if set(wanted).issubset(t)]
    return rows


def get_visible_file(db: Session, caller: Caller, file_id: int, op: Op = Op.FILE_READ) -> File | None:
    return db.scalars(scoped_files(caller, op).where(File.id == file_id)).first()
