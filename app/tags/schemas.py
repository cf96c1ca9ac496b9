from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional

class TagIn(BaseModel):
    name: Optional[str] = Field(default=None, max_length=100)

class TagOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    name: str
    message: Optional[str] = None

class TagUsageOut(BaseModel):
    id: int
    name: str
    usage_count: int
    files: List[str] = Field(default_factory=list)
