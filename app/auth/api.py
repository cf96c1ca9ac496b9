# app/auth/api.py
from typing import Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel, EmailStr
from sqlalchemy.orm import Session

from app.shared.db import get_db
from app.shared.auth import Caller, get_caller
from app.auth.service import register_user, authenticate_user, current_user

router = APIRouter(prefix="/api/auth", tags=["Auth"])

class RegisterIn(BaseModel):
    username: Optional[str] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = None

class LoginIn(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None

class AuthUserOut(BaseModel):
    id: int
    username: str
    email: str
    level: str

class TokenOut(BaseModel):
    token: str
    user: AuthUserOut

@router.post("/register", response_model=TokenOut, status_code=201)
def api_register(inb: RegisterIn, db: Session = Depends(get_db)):
    return register_user(db, inb.username, inb.email, inb.password)

@router.post("/login", response_model=TokenOut)
def api_login(inb: LoginIn, db: Session = Depends(get_db)):
    return authenticate_user(db, inb.email, inb.password)

@router.get("/user", response_model=AuthUserOut)
def api_me(caller: Caller = Depends(get_caller), db: Session = Depends(get_db)):
    return current_user(db, caller.id)
