import logging
from typing import List, Optional

from sqlalchemy import desc
from sqlalchemy.orm import Session

from qbank.core.exceptions import BusinessRuleError, NotFoundError, ValidationError
from qbank.db.session import atomic
from qbank.models.question_bank import Question, QuestionTag, QuestionType, Source, Tag

logger = logging.getLogger(__name__)


def _clean_name(name: Optional[str], field: str) -> str:
    if name is None or not name.strip():
        raise ValidationError(f"{field} cannot be empty")
    return name.strip()


class CRUDCatalog:
    """
    Datos de referencia: tipos de pregunta, fuentes y etiquetas.
    Los nombres de fuentes y etiquetas son únicos (sensibles a mayúsculas).
    """

    # --- Question types ---

    def get_question_types(self, db: Session) -> List[QuestionType]:
        return db.query(QuestionType).order_by(QuestionType.id).all()

    # --- Sources ---

    def get_sources(self, db: Session, search_term: Optional[str] = None) -> List[Source]:
        """
        Obtener fuentes, opcionalmente filtradas por nombre.
        """
        query = db.query(Source)
        if search_term:
            query = query.filter(Source.source_name.ilike(f"%{search_term}%"))
        return query.order_by(desc(Source.created_at), desc(Source.id)).all()

    def get_source(self, db: Session, source_id: int) -> Source:
        db_source = db.query(Source).filter(Source.id == source_id).first()
        if db_source is None:
            raise NotFoundError("Source", source_id)
        return db_source

    def _source_name_taken(self, db: Session, name: str, exclude_id: Optional[int] = None) -> bool:
        query = db.query(Source.id).filter(Source.source_name == name)
        if exclude_id is not None:
            query = query.filter(Source.id != exclude_id)
        return query.first() is not None

    def create_source(self, db: Session, source_name: Optional[str]) -> Source:
        name = _clean_name(source_name, "source_name")
        if self._source_name_taken(db, name):
            raise ValidationError(f"Source already exists: {name}")

        with atomic(db):
            db_obj = Source(source_name=name)
            db.add(db_obj)
            db.flush()
            source_id = db_obj.id

        logger.info(f"Source created: id={source_id}", extra={"entity": "source", "entity_id": source_id})
        return db_obj

    def update_source(self, db: Session, source_id: int, source_name: Optional[str]) -> Source:
        name = _clean_name(source_name, "source_name")
        db_obj = self.get_source(db, source_id)
        if self._source_name_taken(db, name, exclude_id=source_id):
            raise ValidationError(f"Source name already in use: {name}")

        with atomic(db):
            db_obj.source_name = name

        logger.info(f"Source renamed: id={source_id}", extra={"entity": "source", "entity_id": source_id})
        return db_obj

    def delete_source(self, db: Session, source_id: int) -> None:
        """
        Elimina una fuente; falla si alguna pregunta la referencia.
        """
        db_obj = self.get_source(db, source_id)
        in_use = db.query(Question).filter(Question.source_id == source_id).count()
        if in_use > 0:
            raise BusinessRuleError(f"Source {source_id} is used by {in_use} question(s)")

        with atomic(db):
            db.delete(db_obj)

        logger.info(f"Source deleted: id={source_id}", extra={"entity": "source", "entity_id": source_id})

    # --- Tags ---

    def get_tags(self, db: Session, search_term: Optional[str] = None) -> List[Tag]:
        """
        Obtener etiquetas, opcionalmente filtradas por nombre.
        """
        query = db.query(Tag)
        if search_term:
            query = query.filter(Tag.tag_name.ilike(f"%{search_term}%"))
        return query.order_by(desc(Tag.created_at), desc(Tag.id)).all()

    def get_tag(self, db: Session, tag_id: int) -> Tag:
        db_tag = db.query(Tag).filter(Tag.id == tag_id).first()
        if db_tag is None:
            raise NotFoundError("Tag", tag_id)
        return db_tag

    def _tag_name_taken(self, db: Session, name: str, exclude_id: Optional[int] = None) -> bool:
        query = db.query(Tag.id).filter(Tag.tag_name == name)
        if exclude_id is not None:
            query = query.filter(Tag.id != exclude_id)
        return query.first() is not None

    def create_tag(self, db: Session, tag_name: Optional[str]) -> Tag:
        name = _clean_name(tag_name, "tag_name")
        if self._tag_name_taken(db, name):
            raise ValidationError(f"Tag already exists: {name}")

        with atomic(db):
            db_obj = Tag(tag_name=name)
            db.add(db_obj)
            db.flush()
            tag_id = db_obj.id

        logger.info(f"Tag created: id={tag_id}", extra={"entity": "tag", "entity_id": tag_id})
        return db_obj

    def update_tag(self, db: Session, tag_id: int, tag_name: Optional[str]) -> Tag:
        name = _clean_name(tag_name, "tag_name")
        db_obj = self.get_tag(db, tag_id)
        if self._tag_name_taken(db, name, exclude_id=tag_id):
            raise ValidationError(f"Tag name already in use: {name}")

        with atomic(db):
            db_obj.tag_name = name

        logger.info(f"Tag renamed: id={tag_id}", extra={"entity": "tag", "entity_id": tag_id})
        return db_obj

    def delete_tag(self, db: Session, tag_id: int) -> None:
        """
        Elimina una etiqueta; falla si alguna pregunta la usa.
        """
        db_obj = self.get_tag(db, tag_id)
        in_use = db.query(QuestionTag).filter(QuestionTag.tag_id == tag_id).count()
        if in_use > 0:
            raise BusinessRuleError(f"Tag {tag_id} is used by {in_use} question(s)")

        with atomic(db):
            db.delete(db_obj)

        logger.info(f"Tag deleted: id={tag_id}", extra={"entity": "tag", "entity_id": tag_id})


catalog = CRUDCatalog()
