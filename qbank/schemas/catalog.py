from datetime import datetime
from typing import Optional
from pydantic import BaseModel

# --- Question types ---

class QuestionTypeRead(BaseModel):
    id: int
    type_name: str

    class Config:
        from_attributes = True

# --- Sources ---

class SourceCreate(BaseModel):
    source_name: Optional[str] = None

class SourceUpdate(SourceCreate):
    pass

class SourceRead(BaseModel):
    id: int
    source_name: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

# --- Tags ---

class TagCreate(BaseModel):
    tag_name: Optional[str] = None

class TagUpdate(TagCreate):
    pass

class TagRead(BaseModel):
    id: int
    tag_name: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
