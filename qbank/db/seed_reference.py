"""
Seed script para poblar la tabla question_types.

Ejecutar con:
    python -m qbank.db.seed_reference
"""
import logging

from sqlalchemy.orm import Session

from qbank.core.config import settings
from qbank.db.session import Database, atomic
from qbank.models.question_bank import QuestionType

logger = logging.getLogger(__name__)

# Tipos de pregunta en el orden en que se muestran (id ascendente)
QUESTION_TYPES = ["单选题", "多选题", "判断题", "填空题", "简答题"]


def seed_question_types(db: Session) -> int:
    """Inserta los tipos que falten; devuelve cuántos se crearon."""
    existing = {name for (name,) in db.query(QuestionType.type_name).all()}
    missing = [name for name in QUESTION_TYPES if name not in existing]

    with atomic(db):
        for name in missing:
            db.add(QuestionType(type_name=name))

    for name in QUESTION_TYPES:
        if name in existing:
            logger.info(f"  Tipo '{name}' ya existe.")
        else:
            logger.info(f"  Tipo '{name}' creado.")
    return len(missing)


def seed() -> None:
    """Crea las tablas (si no existen) e inserta los tipos de pregunta."""
    database = Database(settings.DATABASE_URI, echo=settings.SQL_ECHO)
    try:
        database.create_all()
        with database.session() as db:
            created = seed_question_types(db)
        logger.info(f"Seed completado: {created} tipos nuevos.")
    finally:
        database.dispose()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    seed()
