import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from tuition_api.core import config
from tuition_api.core.errors import ServiceError
from tuition_api.database import Base, engine
from tuition_api.models import application, payment, tuition, user  # noqa: F401
from tuition_api.routes import application_routes, payment_routes, tuition_routes, user_routes

logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger(__name__)

config.validate_runtime_config()

app = FastAPI(title='Tuition Marketplace API')

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)


@app.exception_handler(ServiceError)
async def handle_service_error(request: Request, exc: ServiceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error('%s %s failed: %s', request.method, request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={'detail': exc.detail})


@app.on_event('startup')
def initialize_database() -> None:
    try:
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')


@app.get('/')
def root():
    return {'status': 'Tuition Marketplace API Running'}


app.include_router(user_routes.router, prefix='/users')
app.include_router(tuition_routes.router, prefix='/tuitions')
app.include_router(application_routes.router, prefix='/applications')
app.include_router(payment_routes.router, prefix='/payments')
