# qbank/main.py
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from qbank.api.v1.endpoints import health, materials, papers, question_types, questions, sources, tags
from qbank.core.config import settings
from qbank.core.exceptions import QBankError
from qbank.core.logging_config import setup_logging
from qbank.db.session import Database
from middleware.request_logging import RequestLoggingMiddleware
import logging

logger = logging.getLogger('qbank')


def _error_response(status_code: int, error: str, data=None) -> JSONResponse:
    body = {'success': False, 'error': error}
    if data is not None:
        body['data'] = data
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


async def qbank_error_handler(request: Request, exc: QBankError):
    log = logger.error if exc.status_code >= 500 else logger.warning
    # El detalle del driver solo va al log, nunca al cliente
    log(
        f'{exc.error_code} on {request.method} {request.url.path}: {exc.message}',
        extra={
            'error_code': exc.error_code,
            'detail': exc.detail,
            'request_id': getattr(request.state, 'request_id', None),
        },
    )
    return _error_response(exc.status_code, exc.message)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    # Errores de forma del payload o de los query params se reportan como 400
    return _error_response(400, 'Invalid request', data=exc.errors())


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if isinstance(exc.detail, str):
        return _error_response(exc.status_code, exc.detail)
    return _error_response(exc.status_code, 'Request failed', data=exc.detail)


async def sqlalchemy_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f'Unhandled database error on {request.method} {request.url.path}', exc_info=exc)
    return _error_response(500, 'Database operation failed')


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f'Unhandled error on {request.method} {request.url.path}', exc_info=exc)
    return _error_response(500, 'Internal server error')


def create_app(database: Optional[Database] = None) -> FastAPI:
    """
    Construye la aplicación. Si no se recibe un Database, se crea uno al
    arrancar a partir de la configuración y se libera al apagar.
    """
    setup_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = database is None
        app.state.database = database or Database(settings.DATABASE_URI, echo=settings.SQL_ECHO)
        logger.info('Question bank API starting up')
        try:
            yield
        finally:
            if owned:
                app.state.database.dispose()
            logger.info('Question bank API shut down')

    app = FastAPI(
        title='Biology Competition Question Bank API',
        description='''
    ## Banco de preguntas para competencias de biología

    **Servicios Disponibles:**
    - **Questions**: Preguntas con opciones y etiquetas
    - **Materials**: Materiales de lectura con sub-preguntas ordenadas
    - **Sources / Tags / Question types**: Catálogos de referencia
    - **Papers**: Compilación de exámenes y exportación a Word
    - **Health Check** y **Metrics** (Prometheus)
    ''',
        version='1.0.0',
        lifespan=lifespan,
        openapi_url='/openapi.json',
        docs_url='/docs',
        redoc_url='/redoc'
    )

    # Configurar CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=['*'],
        allow_headers=['*'],
    )

    # Logging y métricas de todas las requests
    app.add_middleware(RequestLoggingMiddleware)

    app.add_exception_handler(QBankError, qbank_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # Incluir rutas
    app.include_router(health.router, tags=['Health Check'])
    app.include_router(questions.router, prefix='/api/questions', tags=['Questions'])
    app.include_router(materials.router, prefix='/api/materials', tags=['Materials'])
    app.include_router(sources.router, prefix='/api/sources', tags=['Sources'])
    app.include_router(tags.router, prefix='/api/tags', tags=['Tags'])
    app.include_router(question_types.router, prefix='/api/question-types', tags=['Question Types'])
    app.include_router(papers.router, prefix='/api/papers', tags=['Papers'])

    @app.get('/')
    async def root():
        return {
            'message': 'Biology Competition Question Bank API',
            'status': 'operativo',
            'version': '1.0.0',
            'docs': '/docs',
            'available_services': [
                'questions', 'materials', 'sources', 'tags', 'question-types', 'papers', 'health', 'metrics'
            ],
        }

    @app.get('/metrics', include_in_schema=False)
    async def prometheus_metrics():
        """Endpoint de metricas para Prometheus"""
        return Response(
            generate_latest(),
            media_type=CONTENT_TYPE_LATEST
        )

    return app


app = create_app()

if __name__ == '__main__':
    import uvicorn
    uvicorn.run(app, host='0.0.0.0', port=8000)
