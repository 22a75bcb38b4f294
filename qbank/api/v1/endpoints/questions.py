from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from qbank.crud import crud_question
from qbank.db.session import get_db
from qbank.schemas.common import ApiResponse, CreatedId, Pagination
from qbank.schemas.question import QuestionCreate, QuestionDetail, QuestionListData, QuestionUpdate
from qbank.utils.query_parser import parse_id_list, total_pages

router = APIRouter()


@router.get("", response_model=ApiResponse[QuestionListData])
def read_questions(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, alias="pageSize"),
    type_id: Optional[int] = None,
    source_id: Optional[int] = None,
    tag_ids: Optional[str] = Query(None, description="Ids de etiquetas separados por comas"),
    search: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """
    Lista paginada de preguntas con filtros por tipo, fuente, etiquetas y texto.
    """
    questions, total = crud_question.list_questions(
        db,
        page=page,
        page_size=page_size,
        type_id=type_id,
        source_id=source_id,
        tag_ids=parse_id_list(tag_ids),
        search=search,
    )
    data = QuestionListData(
        questions=[QuestionDetail.model_validate(q) for q in questions],
        pagination=Pagination(
            total=total,
            page=page,
            page_size=page_size,
            total_pages=total_pages(total, page_size),
        ),
    )
    return ApiResponse(data=data)


@router.post("", response_model=ApiResponse[CreatedId])
def create_question(question_in: QuestionCreate, db: Session = Depends(get_db)):
    """
    Crea una pregunta con sus opciones y etiquetas.
    """
    db_question = crud_question.create_question(db, question_in)
    return ApiResponse(data=CreatedId(id=db_question.id), message="Question created")


@router.get("/{question_id}", response_model=ApiResponse[QuestionDetail])
def read_question(question_id: int, db: Session = Depends(get_db)):
    db_question = crud_question.get_question(db, question_id)
    return ApiResponse(data=QuestionDetail.model_validate(db_question))


@router.put("/{question_id}", response_model=ApiResponse[QuestionDetail])
def update_question(question_id: int, question_in: QuestionUpdate, db: Session = Depends(get_db)):
    """
    Actualiza una pregunta. `options` y `tag_ids`, si se envían, reemplazan el conjunto completo.
    """
    crud_question.update_question(db, question_id, question_in)
    db_question = crud_question.get_question(db, question_id)
    return ApiResponse(data=QuestionDetail.model_validate(db_question), message="Question updated")


@router.delete("/{question_id}", response_model=ApiResponse)
def delete_question(question_id: int, db: Session = Depends(get_db)):
    crud_question.delete_question(db, question_id)
    return ApiResponse(message="Question deleted")
