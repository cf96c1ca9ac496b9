from datetime import datetime
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import Optional

class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    username: str
    email: str
    level: str
    created_at: datetime

class UserCreate(BaseModel):
    username: Optional[str] = Field(default=None, max_length=80)
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    level: str = "user"

class UserUpdate(BaseModel):
    username: Optional[str] = Field(default=None, max_length=80)
    email: Optional[EmailStr] = None
    level: Optional[str] = None
