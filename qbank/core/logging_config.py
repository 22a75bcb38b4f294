import logging
import logging.config
import json
from datetime import datetime
from typing import Dict, Any
from pathlib import Path

from qbank.core.config import settings

# Campos opcionales que se copian del record al JSON cuando están presentes
EXTRA_FIELDS = (
    "service",
    "request_id",
    "endpoint",
    "method",
    "status_code",
    "response_time_ms",
    "entity",
    "entity_id",
    "error_code",
    "detail",
)


class StructuredFormatter(logging.Formatter):
    """
    Formatter que genera logs en formato JSON estructurado
    para facilitar la integración con sistemas de monitoreo
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "process": record.process,
            "thread": record.thread,
        }

        for field in EXTRA_FIELDS:
            if hasattr(record, field):
                log_entry[field] = getattr(record, field)

        # Agregar información de excepción si existe
        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_entry, ensure_ascii=False, default=str)


def build_logging_config(log_dir: Path, level: str) -> Dict[str, Any]:
    """
    Diccionario para dictConfig: consola legible y archivos JSON rotativos.
    """
    def rotating(filename: str, handler_level: str, backups: int = 10) -> Dict[str, Any]:
        return {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "structured",
            "filename": str(log_dir / filename),
            "maxBytes": 10485760,  # 10MB
            "backupCount": backups,
            "level": handler_level,
            "encoding": "utf-8",
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "structured": {
                "()": StructuredFormatter,
            },
            "simple": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S"
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "simple",
                "level": level,
                "stream": "ext://sys.stdout"
            },
            "file_all": rotating("app.log", level),
            "file_errors": rotating("errors.log", "ERROR"),
            "file_api": rotating("api.log", "INFO"),
            "file_papers": rotating("papers.log", "INFO", backups=5),
        },
        "loggers": {
            "qbank": {
                "level": level,
                "handlers": ["console", "file_all", "file_errors"],
                "propagate": False
            },
            "qbank.services": {
                "level": level,
                "handlers": ["console", "file_papers", "file_errors"],
                "propagate": False
            },
            "middleware.request_logging": {
                "level": "INFO",
                "handlers": ["file_api", "file_errors"],
                "propagate": False
            },
            "uvicorn": {
                "level": "INFO",
                "handlers": ["console", "file_api"],
                "propagate": False
            },
            "uvicorn.access": {
                "level": "INFO",
                "handlers": ["file_api"],
                "propagate": False
            },
            "sqlalchemy.engine": {
                "level": "WARNING",
                "handlers": ["file_all"],
                "propagate": False
            }
        },
        "root": {
            "level": "WARNING",
            "handlers": ["console", "file_all"]
        }
    }


def setup_logging() -> None:
    """
    Configura el sistema de logging con rotación y formato estructurado
    para integración con sistemas de monitoreo
    """
    # Crear directorio de logs si no existe
    log_dir = Path(settings.LOG_DIR)
    log_dir.mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(build_logging_config(log_dir, settings.LOG_LEVEL.upper()))

    logger = logging.getLogger("qbank")
    logger.info("Logging system initialized successfully")
    logger.info(f"Log files will be stored in: {log_dir.absolute()}")


class LoggerAdapter(logging.LoggerAdapter):
    """
    Adapter personalizado para agregar contexto adicional a los logs
    """

    def __init__(self, logger: logging.Logger, extra: Dict[str, Any] = None):
        super().__init__(logger, extra or {})

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        if self.extra:
            kwargs.setdefault('extra', {}).update(self.extra)
        return msg, kwargs


def get_request_logger(request_id: str) -> LoggerAdapter:
    """
    Logger de API que agrega el id de la petición a cada registro
    """
    base_logger = logging.getLogger("middleware.request_logging")
    return LoggerAdapter(base_logger, {"service": "api", "request_id": request_id})


def log_api_request(logger, method: str, endpoint: str,
                   status_code: int = None, response_time_ms: int = None,
                   **kwargs):
    """
    Registra información de una petición API con contexto estructurado

    Args:
        logger: Logger (o LoggerAdapter) a usar
        method: Método HTTP
        endpoint: Endpoint accedido
        status_code: Código de respuesta HTTP
        response_time_ms: Tiempo de respuesta en millisegundos
        **kwargs: Información adicional
    """
    extra = {
        "method": method,
        "endpoint": endpoint,
    }

    if status_code:
        extra["status_code"] = status_code
    if response_time_ms is not None:
        extra["response_time_ms"] = response_time_ms

    extra.update(kwargs)

    if status_code and status_code >= 500:
        logger.error(f"API request failed: {method} {endpoint}", extra=extra)
    elif status_code and status_code >= 400:
        logger.warning(f"API request rejected: {method} {endpoint}", extra=extra)
    else:
        logger.info(f"API request: {method} {endpoint}", extra=extra)
