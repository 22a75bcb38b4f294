from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from qbank.crud.crud_catalog import catalog
from qbank.db.session import get_db
from qbank.schemas.catalog import QuestionTypeRead
from qbank.schemas.common import ApiResponse

router = APIRouter()


@router.get("", response_model=ApiResponse[List[QuestionTypeRead]])
def read_question_types(db: Session = Depends(get_db)):
    """
    Tipos de pregunta ordenados por id.
    """
    question_types = catalog.get_question_types(db)
    return ApiResponse(data=[QuestionTypeRead.model_validate(t) for t in question_types])
