"""
Repositorio del agregado Question (pregunta + opciones + etiquetas).

Las colecciones reemplazables (opciones y etiquetas) se actualizan borrando
todas las filas existentes y reinsertando el conjunto recibido dentro de la
misma transacción; los ids de las opciones no se conservan entre updates.
"""
import logging
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import or_, select, func
from sqlalchemy.orm import Session, joinedload, selectinload

from qbank.core.exceptions import NotFoundError, ValidationError
from qbank.db.session import atomic
from qbank.models.question_bank import Option, Question, QuestionTag
from qbank.schemas.question import OptionCreate, QuestionCreate, QuestionUpdate
from qbank.utils.query_parser import validate_pagination

logger = logging.getLogger(__name__)

SCALAR_FIELDS = ("type_id", "stem", "answer", "explanation", "source_id")


def with_details(query):
    """
    Agrega la carga de tipo, fuente, opciones y etiquetas a una consulta de preguntas.
    """
    return query.options(
        joinedload(Question.question_type),
        joinedload(Question.source),
        selectinload(Question.options),
        selectinload(Question.tags),
    )


def _check_option_labels(options: Iterable[OptionCreate]) -> None:
    seen = set()
    for option in options:
        if option.opt_label in seen:
            raise ValidationError(f"Duplicate option label: {option.opt_label}")
        seen.add(option.opt_label)


def validate_question_payload(data: QuestionCreate) -> None:
    """
    Valida los campos obligatorios de una pregunta nueva.
    """
    if not data.type_id or not data.stem:
        raise ValidationError("type_id and stem are required")
    _check_option_labels(data.options)


def _insert_options(db: Session, question_id: int, options: Iterable[OptionCreate]) -> None:
    for option in options:
        db.add(Option(
            question_id=question_id,
            opt_label=option.opt_label,
            opt_content=option.opt_content,
            is_correct=option.is_correct,
            sort_order=option.sort_order,
        ))


def _insert_tag_links(db: Session, question_id: int, tag_ids: Iterable[int]) -> None:
    for tag_id in tag_ids:
        db.add(QuestionTag(question_id=question_id, tag_id=tag_id))


def insert_question(db: Session, data: QuestionCreate) -> Question:
    """
    Inserta la pregunta con sus opciones y etiquetas sin hacer commit.
    Debe llamarse dentro de una transacción abierta con atomic().
    """
    validate_question_payload(data)
    db_question = Question(
        type_id=data.type_id,
        stem=data.stem,
        answer=data.answer or None,
        explanation=data.explanation or None,
        source_id=data.source_id or None,
    )
    db.add(db_question)
    db.flush()

    _insert_options(db, db_question.id, data.options)
    _insert_tag_links(db, db_question.id, data.tag_ids)
    db.flush()
    return db_question


def create_question(db: Session, data: QuestionCreate) -> Question:
    """
    Crea una pregunta con sus opciones y etiquetas en una sola transacción.
    """
    validate_question_payload(data)
    with atomic(db):
        db_question = insert_question(db, data)
        question_id = db_question.id

    logger.info(
        f"Question created: id={question_id} options={len(data.options)} tags={len(data.tag_ids)}",
        extra={"entity": "question", "entity_id": question_id},
    )
    return db_question


def question_exists(db: Session, question_id: int) -> bool:
    return db.query(Question.id).filter(Question.id == question_id).first() is not None


def get_question(db: Session, question_id: int) -> Question:
    """
    Obtiene una pregunta por su ID con tipo, fuente, opciones y etiquetas.
    """
    db_question = with_details(db.query(Question)).filter(Question.id == question_id).first()
    if db_question is None:
        raise NotFoundError("Question", question_id)
    return db_question


def get_questions_by_ids(db: Session, question_ids: List[int]) -> List[Question]:
    """
    Obtiene varias preguntas respetando el orden de los ids recibidos.
    """
    if not question_ids:
        return []
    rows = with_details(db.query(Question)).filter(Question.id.in_(question_ids)).all()
    by_id = {row.id: row for row in rows}
    for question_id in question_ids:
        if question_id not in by_id:
            raise NotFoundError("Question", question_id)
    return [by_id[question_id] for question_id in question_ids]


def replace_options(db: Session, question_id: int, options: List[OptionCreate]) -> None:
    _check_option_labels(options)
    db.query(Option).filter(Option.question_id == question_id).delete()
    db.flush()
    _insert_options(db, question_id, options)


def replace_tag_links(db: Session, question_id: int, tag_ids: List[int]) -> None:
    db.query(QuestionTag).filter(QuestionTag.question_id == question_id).delete()
    db.flush()
    _insert_tag_links(db, question_id, tag_ids)


def update_question(db: Session, question_id: int, question_update: QuestionUpdate) -> Question:
    """
    Actualiza una pregunta existente.

    Solo se escriben los campos presentes en el payload. Si vienen `options`
    o `tag_ids`, el conjunto completo se reemplaza.
    """
    if not question_exists(db, question_id):
        raise NotFoundError("Question", question_id)

    update_data = question_update.model_dump(exclude_unset=True)
    for required in ("type_id", "stem"):
        if required in update_data and not update_data[required]:
            raise ValidationError(f"{required} cannot be empty")
    if question_update.options is not None:
        _check_option_labels(question_update.options)

    with atomic(db):
        db_question = db.query(Question).filter(Question.id == question_id).first()

        scalar_changes = {field: update_data[field] for field in SCALAR_FIELDS if field in update_data}
        if scalar_changes:
            for field, value in scalar_changes.items():
                setattr(db_question, field, value)
            db_question.updated_at = func.now()

        if question_update.options is not None:
            replace_options(db, question_id, question_update.options)

        if question_update.tag_ids is not None:
            replace_tag_links(db, question_id, question_update.tag_ids)

    logger.info(
        f"Question updated: id={question_id} fields={sorted(update_data)}",
        extra={"entity": "question", "entity_id": question_id},
    )
    return db_question


def delete_question(db: Session, question_id: int) -> None:
    """
    Elimina una pregunta; opciones y etiquetas se borran en cascada.
    """
    db_question = db.query(Question).filter(Question.id == question_id).first()
    if db_question is None:
        raise NotFoundError("Question", question_id)

    with atomic(db):
        db.delete(db_question)

    logger.info(f"Question deleted: id={question_id}", extra={"entity": "question", "entity_id": question_id})


def list_questions(
    db: Session,
    page: int = 1,
    page_size: int = 10,
    type_id: Optional[int] = None,
    source_id: Optional[int] = None,
    tag_ids: Optional[List[int]] = None,
    search: Optional[str] = None,
) -> Tuple[List[Question], int]:
    """
    Obtiene una página de preguntas filtradas y el total bajo los mismos filtros.

    Los filtros se combinan con AND; `tag_ids` exige al menos una etiqueta en común
    y `search` busca sin distinguir mayúsculas en enunciado, respuesta y explicación.
    """
    validate_pagination(page, page_size)

    query = db.query(Question)

    if type_id is not None:
        query = query.filter(Question.type_id == type_id)

    if source_id is not None:
        query = query.filter(Question.source_id == source_id)

    if search:
        pattern = f"%{search}%"
        query = query.filter(
            or_(
                Question.stem.ilike(pattern),
                Question.answer.ilike(pattern),
                Question.explanation.ilike(pattern),
            )
        )

    if tag_ids:
        tagged = select(QuestionTag.question_id).where(QuestionTag.tag_id.in_(tag_ids))
        query = query.filter(Question.id.in_(tagged))

    total = query.count()
    questions = (
        with_details(query)
        .order_by(Question.created_at.desc(), Question.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return questions, total
