"""
Repositorio del agregado Material (material + preguntas ordenadas por sub_no).

Actualizar `questions` reemplaza el conjunto completo: se borran los vínculos y
las preguntas anteriores y se vuelven a crear todas, por lo que cualquier id de
sub-pregunta previo deja de ser válido.
"""
import logging
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload, joinedload

from qbank.core.exceptions import NotFoundError, ValidationError
from qbank.crud.crud_question import insert_question, validate_question_payload
from qbank.db.session import atomic
from qbank.models.question_bank import Material, MaterialQuestion, Question
from qbank.schemas.material import MaterialCreate, MaterialUpdate
from qbank.schemas.question import QuestionCreate
from qbank.utils.query_parser import validate_pagination

logger = logging.getLogger(__name__)

SCALAR_FIELDS = ("title", "content", "source_id")


def _with_details(query):
    return query.options(
        joinedload(Material.source),
        selectinload(Material.question_links)
        .joinedload(MaterialQuestion.question)
        .options(
            joinedload(Question.question_type),
            joinedload(Question.source),
            selectinload(Question.options),
            selectinload(Question.tags),
        ),
    )


def _insert_sub_questions(db: Session, material_id: int, questions: List[QuestionCreate]) -> None:
    for index, question_data in enumerate(questions):
        db_question = insert_question(db, question_data)
        db.add(MaterialQuestion(material_id=material_id, question_id=db_question.id, sub_no=index + 1))
    db.flush()


def _linked_question_ids(db: Session, material_id: int) -> List[int]:
    rows = db.query(MaterialQuestion.question_id).filter(MaterialQuestion.material_id == material_id).all()
    return [row.question_id for row in rows]


def _delete_sub_questions(db: Session, material_id: int) -> int:
    question_ids = _linked_question_ids(db, material_id)
    db.query(MaterialQuestion).filter(MaterialQuestion.material_id == material_id).delete()
    if question_ids:
        # Opciones y etiquetas se borran en cascada en la base
        db.query(Question).filter(Question.id.in_(question_ids)).delete()
    db.flush()
    return len(question_ids)


def create_material(db: Session, data: MaterialCreate) -> Material:
    """
    Crea un material y todas sus preguntas en una sola transacción.
    """
    if not data.content:
        raise ValidationError("content is required")
    for question_data in data.questions:
        validate_question_payload(question_data)

    with atomic(db):
        db_material = Material(
            title=data.title or None,
            content=data.content,
            source_id=data.source_id or None,
        )
        db.add(db_material)
        db.flush()
        material_id = db_material.id
        _insert_sub_questions(db, material_id, data.questions)

    logger.info(
        f"Material created: id={material_id} questions={len(data.questions)}",
        extra={"entity": "material", "entity_id": material_id},
    )
    return db_material


def get_material(db: Session, material_id: int) -> Material:
    """
    Obtiene un material con su fuente y sus preguntas ordenadas por sub_no.
    """
    db_material = _with_details(db.query(Material)).filter(Material.id == material_id).first()
    if db_material is None:
        raise NotFoundError("Material", material_id)
    return db_material


def get_materials_by_ids(db: Session, material_ids: List[int]) -> List[Material]:
    if not material_ids:
        return []
    rows = _with_details(db.query(Material)).filter(Material.id.in_(material_ids)).all()
    by_id = {row.id: row for row in rows}
    for material_id in material_ids:
        if material_id not in by_id:
            raise NotFoundError("Material", material_id)
    return [by_id[material_id] for material_id in material_ids]


def update_material(db: Session, material_id: int, material_update: MaterialUpdate) -> Material:
    """
    Actualiza un material existente; `questions` reemplaza todas las sub-preguntas.
    """
    db_material = db.query(Material).filter(Material.id == material_id).first()
    if db_material is None:
        raise NotFoundError("Material", material_id)

    update_data = material_update.model_dump(exclude_unset=True)
    if "content" in update_data and not update_data["content"]:
        raise ValidationError("content cannot be empty")
    if material_update.questions is not None:
        for question_data in material_update.questions:
            validate_question_payload(question_data)

    with atomic(db):
        scalar_changes = {field: update_data[field] for field in SCALAR_FIELDS if field in update_data}
        if scalar_changes:
            for field, value in scalar_changes.items():
                setattr(db_material, field, value)
            db_material.updated_at = func.now()

        if material_update.questions is not None:
            removed = _delete_sub_questions(db, material_id)
            _insert_sub_questions(db, material_id, material_update.questions)
            logger.info(
                f"Material {material_id} sub-questions replaced: {removed} -> {len(material_update.questions)}",
                extra={"entity": "material", "entity_id": material_id},
            )

    logger.info(
        f"Material updated: id={material_id} fields={sorted(update_data)}",
        extra={"entity": "material", "entity_id": material_id},
    )
    return db_material


def delete_material(db: Session, material_id: int) -> None:
    """
    Elimina un material junto con sus preguntas, opciones y etiquetas.
    """
    db_material = db.query(Material).filter(Material.id == material_id).first()
    if db_material is None:
        raise NotFoundError("Material", material_id)

    with atomic(db):
        removed = _delete_sub_questions(db, material_id)
        db.delete(db_material)

    logger.info(
        f"Material deleted: id={material_id} questions={removed}",
        extra={"entity": "material", "entity_id": material_id},
    )


def list_materials(
    db: Session,
    page: int = 1,
    page_size: int = 10,
    question_id: Optional[int] = None,
) -> Tuple[List[Material], Optional[int]]:
    """
    Obtiene materiales paginados con sus preguntas.

    Si se indica `question_id` se ignora la paginación y se devuelven todos los
    materiales que contienen esa pregunta; el total devuelto es None.
    """
    validate_pagination(page, page_size)

    if question_id is not None:
        materials = (
            _with_details(db.query(Material))
            .join(MaterialQuestion, MaterialQuestion.material_id == Material.id)
            .filter(MaterialQuestion.question_id == question_id)
            .order_by(Material.created_at.desc(), Material.id.desc())
            .all()
        )
        return materials, None

    total = db.query(Material).count()
    materials = (
        _with_details(db.query(Material))
        .order_by(Material.created_at.desc(), Material.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return materials, total
