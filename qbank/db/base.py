# qbank/db/base.py
from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

# Nombres de índices y restricciones estables para las migraciones de Alembic
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """
    Clase base declarativa de los modelos del banco de preguntas.
    Los modelos se registran en qbank.db.models_registry.
    """
    metadata = MetaData(naming_convention=NAMING_CONVENTION)
