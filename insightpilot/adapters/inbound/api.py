# API Adapter - FastAPI entry point

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from insightpilot import __version__
from insightpilot.config.settings import settings
from insightpilot.adapters.inbound.dependencies import get_deps
from insightpilot.adapters.inbound.routes import (
    connections_router,
    health_router,
    sessions_router,
    settings_router,
)
from insightpilot.core.domain.errors import InsightPilotError
from insightpilot.core.domain.responses import APIResponse
from insightpilot.utils.logging import setup_logging

setup_logging()
logger = logging.getLogger(__name__)

# Código de error -> status HTTP
STATUS_CODES = {
    "VALIDATION_ERROR": 422,
    "NOT_FOUND": 404,
    "ALREADY_IN_PROGRESS": 409,
    "SESSION_BUSY": 409,
    "NO_ACTIVE_CONNECTION": 409,
    "NOTHING_TO_EXPORT": 404,
    "BACKEND_EXECUTION_ERROR": 502,
    "STORE_ERROR": 503,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Inicializa componentes al startup"""
    logger.info(f"Iniciando {settings.app_name} API...")
    deps = get_deps()
    deps.initialize_all()
    logger.info(f"Store: {settings.store.backend}, conexiones: {len(deps.registry)}")
    yield
    logger.info("Cerrando API...")


app = FastAPI(
    title=f"{settings.app_name} API",
    description="Consultas en lenguaje natural sobre conexiones de base de datos",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(InsightPilotError)
async def insightpilot_exception_handler(request: Request, exc: InsightPilotError):
    """Errores de dominio con el envelope estándar"""
    status_code = STATUS_CODES.get(exc.code, 500)
    logger.info(f"{request.method} {request.url.path} -> {status_code} {exc.code}")
    return JSONResponse(
        status_code=status_code,
        content=APIResponse.from_exception(exc).model_dump(),
    )


app.include_router(health_router)
app.include_router(connections_router)
app.include_router(sessions_router)
app.include_router(settings_router)
