from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.shared.auth import Caller
from app.shared.db import get_db
from app.shared.guard import Op, guard_gate
from app.tags.schemas import TagIn, TagOut, TagUsageOut
from app.tags.service import list_names, list_with_usage, create_tag, rename_tag, delete_tag

# Mounted under /api/files/tags; include before the files router so "tags"
# is never parsed as a file id.
router = APIRouter(prefix="/api/files/tags", tags=["Tags"])

@router.get("/all", response_model=list[str])
def api_tag_names(caller: Caller = Depends(guard_gate(Op.TAG_LIST)), db: Session = Depends(get_db)):
    return list_names(db)

@router.get("", response_model=list[TagUsageOut])
def api_tag_usage(caller: Caller = Depends(guard_gate(Op.TAG_USAGE)), db: Session = Depends(get_db)):
    return list_with_usage(db)

@router.post("", response_model=TagOut, status_code=201)
def api_create_tag(payload: TagIn, caller: Caller = Depends(guard_gate(Op.TAG_CREATE)), db: Session = Depends(get_db)):
    tag = create_tag(db, payload.name)
    return TagOut(id=tag.id, name=tag.name, message="Tag created successfully")

@router.put("/{tag_id}", response_model=TagOut)
def api_rename_tag(
    tag_id: int,
    payload: TagIn,
    caller: Caller = Depends(guard_gate(Op.TAG_RENAME)),
    db: Session = Depends(get_db),
):
    tag = rename_tag(db, tag_id, payload.name)
    return TagOut(id=tag.id, name=tag.name, message="Tag updated successfully")

@router.delete("/{tag_id}")
def api_delete_tag(tag_id: int, caller: Caller = Depends(guard_gate(Op.TAG_DELETE)), db: Session = Depends(get_db)):
    delete_tag(db, tag_id)
    return {"message": "Tag deleted successfully"}
