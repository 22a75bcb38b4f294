# MIDDLEWARE DE LOGGING DE PETICIONES
# Asigna un id a cada peticion, mide su duracion y alimenta las metricas de Prometheus

import time
import uuid
from fastapi import Request
from prometheus_client import Counter, Histogram
from starlette.middleware.base import BaseHTTPMiddleware

from qbank.core.logging_config import get_request_logger, log_api_request

REQUEST_ID_HEADER = 'X-Request-ID'

API_REQUESTS_TOTAL = Counter(
    'qbank_api_requests_total',
    'Total de peticiones HTTP atendidas',
    ['method', 'endpoint', 'status_code'],
)
API_REQUEST_DURATION = Histogram(
    'qbank_api_request_duration_seconds',
    'Duracion de las peticiones HTTP',
    ['method', 'endpoint'],
)


def generate_request_id() -> str:
    return f'req_{uuid.uuid4().hex[:12]}'


def _route_template(request: Request) -> str:
    # Plantilla de la ruta ("/api/questions/{question_id}") para no disparar la cardinalidad
    route = request.scope.get('route')
    return getattr(route, 'path', request.url.path)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or generate_request_id()
        request.state.request_id = request_id
        logger = get_request_logger(request_id)

        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            elapsed = time.perf_counter() - start
            endpoint = _route_template(request)
            API_REQUESTS_TOTAL.labels(request.method, endpoint, '500').inc()
            API_REQUEST_DURATION.labels(request.method, endpoint).observe(elapsed)
            logger.exception(f'Unhandled error: {request.method} {request.url.path}')
            raise

        elapsed = time.perf_counter() - start
        endpoint = _route_template(request)
        API_REQUESTS_TOTAL.labels(request.method, endpoint, str(response.status_code)).inc()
        API_REQUEST_DURATION.labels(request.method, endpoint).observe(elapsed)
        log_api_request(
            logger,
            request.method,
            request.url.path,
            status_code=response.status_code,
            response_time_ms=int(elapsed * 1000),
        )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
