import logging
import sys

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from medibook.core import config
from medibook.database import create_schema
from medibook.routes import appointment_routes, auth_routes, doctor_routes, socket_routes, voice_routes
from medibook.services.notifications import WebSocketHub

logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger(__name__)

config.validate_runtime_config()

app = FastAPI(title='MediBook Voice Appointment API')

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

app.state.event_bus = WebSocketHub(broadcast_unscoped=config.BROADCAST_UNSCOPED)


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={'detail': 'Missing or invalid fields', 'errors': jsonable_encoder(exc.errors())},
    )


@app.on_event('startup')
def initialize_database() -> None:
    try:
        create_schema()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL.')


@app.get('/api/health')
def health():
    return {'status': 'OK', 'message': 'Voice Appointment System API is running'}


app.include_router(auth_routes.router, prefix='/api/auth')
app.include_router(doctor_routes.router, prefix='/api/doctors')
app.include_router(appointment_routes.router, prefix='/api/appointments')
app.include_router(voice_routes.router, prefix='/api/voice')
app.include_router(socket_routes.router)


def run() -> None:
    uvicorn.run(app, host='0.0.0.0', port=3001)
