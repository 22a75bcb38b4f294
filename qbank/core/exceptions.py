# qbank/core/exceptions.py
"""
Excepciones de dominio del banco de preguntas.

Cada clase lleva el código HTTP con el que la capa API la reporta, de modo que
los repositorios no dependan de FastAPI.
"""
from typing import Optional


class QBankError(Exception):
    """Base class for every error raised by the question bank."""

    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail


class ValidationError(QBankError):
    """Missing required field, malformed id/page parameter or duplicate unique name."""

    status_code = 400
    error_code = "VALIDATION_ERROR"


class NotFoundError(QBankError):
    """The requested id has no matching row."""

    status_code = 404
    error_code = "NOT_FOUND"

    def __init__(self, entity: str, entity_id: int):
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class PersistenceError(QBankError):
    """Store-level failure; the surrounding transaction has been rolled back."""

    status_code = 500
    error_code = "PERSISTENCE_ERROR"


class BusinessRuleError(PersistenceError):
    """A write blocked by a known rule, e.g. deleting a source still in use."""

    status_code = 400
    error_code = "BUSINESS_RULE"
