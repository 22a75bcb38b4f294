# qbank/db/models_registry.py
# Este archivo importa todos los modelos para que Alembic pueda detectarlos
# Se importa en alembic/env.py

from qbank.db.base import Base
from qbank.models.question_bank import (
    QuestionType, Source, Tag, Question, Option, QuestionTag, Material, MaterialQuestion,
)

# Exportar Base para uso en Alembic
__all__ = [
    "Base", "QuestionType", "Source", "Tag", "Question", "Option",
    "QuestionTag", "Material", "MaterialQuestion",
]
