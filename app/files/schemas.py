from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import List, Optional

class FileMinimalOut(BaseModel):
    """What a viewer may see of a file."""
    # extra="forbid" keeps a full record from validating as the viewer projection
    model_config = ConfigDict(from_attributes=True, extra="forbid")
    id: int
    name: str
    file_path: str
    created_at: datetime
    url: str

class FileOut(FileMinimalOut):
    description: Optional[str] = None
    file_type: str
    size: int
    user_id: int
    tags: List[str] = Field(default_factory=list)

class FileUpdate(BaseModel):
    name: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None
    tags: Optional[List[str]] = Field(default=None, description="Full replacement tag set; null or absent clears")
