# qbank/scripts/prestart.py
import logging
import sys
import time
from sqlalchemy import create_engine, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from qbank.core.config import settings

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

max_tries = 60
wait_seconds = 2


def wait_for_database(uri: str, tries: int = max_tries, wait: float = wait_seconds) -> bool:
    """
    Intenta conectarse hasta `tries` veces; devuelve True en cuanto la base responde.
    """
    # Imprimimos la URI que estamos intentando usar para depuración
    logger.info(f"Esperando a la base de datos en: {make_url(uri).render_as_string(hide_password=True)}")

    engine = create_engine(uri)
    try:
        for i in range(1, tries + 1):
            try:
                with engine.connect() as connection:
                    connection.execute(text("SELECT 1"))
                logger.info("Conexión a la base de datos establecida exitosamente")
                return True
            except SQLAlchemyError as e:
                logger.warning(f"Intento {i}/{tries}: Base de datos no está lista. Reintentando...")
                logger.debug(f"Error de conexión: {e}")
                time.sleep(wait)
    finally:
        engine.dispose()

    logger.error("No se pudo conectar a la base de datos después de varios intentos. Saliendo.")
    return False


if __name__ == "__main__":
    sys.exit(0 if wait_for_database(settings.DATABASE_URI) else 1)
