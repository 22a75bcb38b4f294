from urllib.parse import quote

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.orm import Session

from qbank.core.config import settings
from qbank.core.exceptions import ValidationError
from qbank.crud import crud_material, crud_question
from qbank.db.session import get_db
from qbank.schemas.common import ApiResponse
from qbank.schemas.paper import PaperDocument, PaperRequest
from qbank.services.paper_compiler import compile_paper
from qbank.services.word_exporter import DOCX_MEDIA_TYPE, export_paper_to_docx

router = APIRouter()


def _compile(db: Session, paper_in: PaperRequest) -> PaperDocument:
    if not paper_in.question_ids and not paper_in.material_ids:
        raise ValidationError("Select at least one question or material")

    questions = crud_question.get_questions_by_ids(db, paper_in.question_ids)
    materials = crud_material.get_materials_by_ids(db, paper_in.material_ids)

    return compile_paper(
        questions,
        materials,
        title=paper_in.title or settings.DEFAULT_PAPER_TITLE,
        subtitle=paper_in.subtitle,
        score_per_item=settings.SCORE_PER_ITEM,
        duration_minutes=settings.EXAM_DURATION_MINUTES,
    )


@router.post("/preview", response_model=ApiResponse[PaperDocument])
def preview_paper(paper_in: PaperRequest, db: Session = Depends(get_db)):
    """
    Compila el examen y su hoja de respuestas sin generar el archivo.
    """
    return ApiResponse(data=_compile(db, paper_in))


@router.post("/export", response_class=Response)
def export_paper(paper_in: PaperRequest, db: Session = Depends(get_db)):
    """
    Descarga el examen compilado como documento Word.
    """
    paper = _compile(db, paper_in)
    content = export_paper_to_docx(paper)

    filename = quote(f"{paper.title}.docx")
    return Response(
        content=content,
        media_type=DOCX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{filename}"},
    )
