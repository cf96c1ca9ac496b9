from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.shared.auth import Caller
from app.shared.db import get_db
from app.shared.guard import Op, guard_gate
from app.users.schemas import UserOut, UserCreate, UserUpdate
from app.users.service import list_users, get_user, create_user, update_user, delete_user

router = APIRouter(prefix="/api/users", tags=["Users"])

@router.get("", response_model=list[UserOut])
def api_list_users(caller: Caller = Depends(guard_gate(Op.USER_LIST)), db: Session = Depends(get_db)):
    return list_users(db)

@router.get("/{user_id}", response_model=UserOut)
def api_get_user(user_id: int, caller: Caller = Depends(guard_gate(Op.USER_READ)), db: Session = Depends(get_db)):
    return get_user(db, caller, user_id)

@router.post("", response_model=UserOut, status_code=201)
def api_create_user(payload: UserCreate, caller: Caller = Depends(guard_gate(Op.USER_CREATE)), db: Session = Depends(get_db)):
    return create_user(db, payload.username, payload.email, payload.password, payload.level)

@router.put("/{user_id}", response_model=UserOut)
def api_update_user(
    user_id: int,
    payload: UserUpdate,
    caller: Caller = Depends(guard_gate(Op.USER_UPDATE)),
    db: Session = Depends(get_db),
):
    return update_user(db, caller, user_id, payload.username, payload.email, payload.level)

@router.delete("/{user_id}")
def api_delete_user(user_id: int, caller: Caller = Depends(guard_gate(Op.USER_DELETE)), db: Session = Depends(get_db)):
    delete_user(db, caller, user_id)
    return {"message": "User deleted successfully"}
