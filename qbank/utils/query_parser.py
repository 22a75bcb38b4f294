import logging
import math
from typing import Any, List, Optional

from qbank.core.exceptions import ValidationError

logger = logging.getLogger(__name__)


def parse_id_list(raw: Optional[str]) -> List[int]:
    """
    Parsea una lista de ids separada por comas, p. ej. "3, 7,12".

    Args:
        raw: Cadena recibida en el query string (puede ser None o vacía)

    Returns:
        Lista de enteros en el orden recibido

    Raises:
        ValidationError: Si algún elemento no es un entero
    """
    if raw is None or not raw.strip():
        return []

    ids = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            ids.append(int(part))
        except ValueError:
            logger.warning(f"Invalid id in list: {raw!r}")
            raise ValidationError(f"Invalid id list: {raw}")
    return ids


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 1


def validate_pagination(page: Any, page_size: Any) -> None:
    """Both page and page_size must be positive integers."""
    if not _is_positive_int(page) or not _is_positive_int(page_size):
        raise ValidationError(f"Invalid pagination parameters: page={page}, pageSize={page_size}")


def total_pages(total: int, page_size: int) -> int:
    return math.ceil(total / page_size) if page_size else 0
