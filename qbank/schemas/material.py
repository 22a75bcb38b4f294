from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel

from qbank.schemas.common import Pagination
from qbank.schemas.question import QuestionCreate, QuestionDetail


class MaterialCreate(BaseModel):
    """
    Schema para crear un material con sus preguntas en orden.
    """
    title: Optional[str] = None
    content: Optional[str] = None
    source_id: Optional[int] = None
    questions: List[QuestionCreate] = []


class MaterialUpdate(BaseModel):
    """
    Schema para actualizar un material. Si se envía `questions`
    el conjunto completo de preguntas se reemplaza.
    """
    title: Optional[str] = None
    content: Optional[str] = None
    source_id: Optional[int] = None
    questions: Optional[List[QuestionCreate]] = None


class MaterialDetail(BaseModel):
    id: int
    title: Optional[str] = None
    content: str
    source_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    source_name: Optional[str] = None
    questions: List[QuestionDetail] = []

    class Config:
        from_attributes = True


class MaterialListData(BaseModel):
    materials: List[MaterialDetail]
    pagination: Optional[Pagination] = None
