from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel

from qbank.schemas.catalog import TagRead
from qbank.schemas.common import Pagination


class OptionBase(BaseModel):
    """
    Schema base para una opción de respuesta.
    """
    opt_label: str
    opt_content: str = ""
    is_correct: bool = False
    sort_order: int = 0


class OptionCreate(OptionBase):
    pass


class OptionRead(OptionBase):
    id: int
    question_id: int

    class Config:
        from_attributes = True


class QuestionCreate(BaseModel):
    """
    Schema para crear una pregunta junto con sus opciones y etiquetas.
    type_id y stem son obligatorios; se validan en la capa CRUD.
    """
    type_id: Optional[int] = None
    stem: Optional[str] = None
    answer: Optional[str] = None
    explanation: Optional[str] = None
    source_id: Optional[int] = None
    options: List[OptionCreate] = []
    tag_ids: List[int] = []


class QuestionUpdate(BaseModel):
    """
    Schema para actualizar una pregunta. Solo se escriben los campos enviados.
    """
    type_id: Optional[int] = None
    stem: Optional[str] = None
    answer: Optional[str] = None
    explanation: Optional[str] = None
    source_id: Optional[int] = None
    options: Optional[List[OptionCreate]] = None
    tag_ids: Optional[List[int]] = None


class QuestionDetail(BaseModel):
    """
    Schema para devolver una pregunta con tipo, fuente, opciones y etiquetas.
    """
    id: int
    type_id: int
    stem: str
    answer: Optional[str] = None
    explanation: Optional[str] = None
    source_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    type_name: Optional[str] = None
    source_name: Optional[str] = None
    options: List[OptionRead] = []
    tags: List[TagRead] = []

    class Config:
        from_attributes = True


class QuestionListData(BaseModel):
    questions: List[QuestionDetail]
    pagination: Pagination
