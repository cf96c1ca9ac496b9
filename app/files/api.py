import json

from fastapi import APIRouter, UploadFile, File as Upload, Form, Depends, Query
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from app.shared.auth import Caller
from app.shared.db import get_db
from app.shared.errors import ValidationError
from app.shared.guard import Op, guard_gate
from app.files.schemas import FileOut, FileMinimalOut, FileUpdate
from app.files.service import create_file, list_files, get_file, get_file_blob, update_file, delete_file

router = APIRouter(prefix="/api/files", tags=["Files"])

def _parse_tags(raw: str | None) -> list[str]:
    # multipart forms carry the tag list as a JSON array
    if not raw:
        return []
    try:
        tags = json.loads(raw)
    except json.JSONDecodeError:
        raise ValidationError("tags must be a JSON array of strings")
    if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
        raise ValidationError("tags must be a JSON array of strings")
    return tags

@router.get("", response_model=list[FileOut | FileMinimalOut])
def api_list_files(
    search: str | None = Query(None),
    tags: list[str] | None = Query(None),
    caller: Caller = Depends(guard_gate(Op.FILE_LIST)),
    db: Session = Depends(get_db),
):
    return list_files(db, caller, search=search, tags=tags)

@router.post("", response_model=FileOut, status_code=201)
async def api_upload_file(
    file: UploadFile | None = Upload(None),
    name: str | None = Form(None),
    description: str | None = Form(None),
    tags: str | None = Form(None),
    caller: Caller = Depends(guard_gate(Op.FILE_CREATE)),
    db: Session = Depends(get_db),
):
    if file is None:
        raise ValidationError("Please upload a file")
    return await create_file(db, caller, file, name=name, description=description, tags=_parse_tags(tags))

@router.get("/{file_id}", response_model=FileOut | FileMinimalOut)
def api_get_file(file_id: int, caller: Caller = Depends(guard_gate(Op.FILE_READ)), db: Session = Depends(get_db)):
    return get_file(db, caller, file_id)

@router.get("/{file_id}/raw")
def api_raw_file(file_id: int, caller: Caller = Depends(guard_gate(Op.FILE_READ)), db: Session = Depends(get_db)):
    f = get_file_blob(db, caller, file_id)
    return FileResponse(path=f.file_path, media_type=f.file_type, filename=f.name)

@router.put("/{file_id}", response_model=FileOut)
def api_update_file(
    file_id: int,
    payload: FileUpdate,
    caller: Caller = Depends(guard_gate(Op.FILE_UPDATE)),
    db: Session = Depends(get_db),
):
    return update_file(db, caller, file_id, payload.name, payload.description, payload.tags)

@router.delete("/{file_id}")
def api_delete_file(file_id: int, caller: Caller = Depends(guard_gate(Op.FILE_DELETE)), db: Session = Depends(get_db)):
    delete_file(db, caller, file_id)
    return {"message": "File deleted"}
