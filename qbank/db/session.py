# qbank/db/session.py
import logging
from contextlib import contextmanager
from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from qbank.core.exceptions import PersistenceError
from qbank.db.base import Base

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """
    Handle explícito sobre el motor y la fábrica de sesiones.

    Se construye al arrancar la aplicación y se libera con dispose() al apagarla.
    """

    def __init__(self, url: str, echo: bool = False) -> None:
        engine_kwargs = {"echo": echo}
        if url.startswith("sqlite"):
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if url in ("sqlite://", "sqlite:///:memory:"):
                # Una sola conexión compartida para que la base en memoria sobreviva
                engine_kwargs["poolclass"] = StaticPool
        else:
            engine_kwargs.update(pool_pre_ping=True, pool_size=5, max_overflow=10)

        # Se crea el motor (engine) de SQLAlchemy usando la URI recibida.
        self.engine = create_engine(url, **engine_kwargs)
        if url.startswith("sqlite"):
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)

        # Se crea una fábrica de sesiones que se usará para crear sesiones individuales.
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        logger.info(f"Database handle initialized for {self.engine.url.render_as_string(hide_password=True)}")

    def create_all(self) -> None:
        """Create every mapped table that does not exist yet."""
        # Registra todos los modelos en Base.metadata
        import qbank.db.models_registry  # noqa: F401

        Base.metadata.create_all(self.engine)
        logger.info("Database schema initialized")

    @contextmanager
    def session(self) -> Iterator[Session]:
        db = self.SessionLocal()
        try:
            yield db
        finally:
            db.close()

    def dispose(self) -> None:
        self.engine.dispose()
        logger.info("Database engine disposed")


# Función generadora para obtener instancias de base de datos
def get_db(request: Request) -> Iterator[Session]:
    db = request.app.state.database.SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def atomic(db: Session) -> Iterator[Session]:
    """
    Ejecuta un bloque como una sola transacción.

    Hace commit si el bloque termina sin error; ante cualquier error hace rollback.
    Los errores de SQLAlchemy se re-lanzan como PersistenceError.
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as e:
        logger.error("DB error occurred, rolling back transaction", exc_info=True)
        db.rollback()
        raise PersistenceError("Database operation failed", detail=str(getattr(e, "orig", None) or e)) from e
    except Exception:
        db.rollback()
        raise
