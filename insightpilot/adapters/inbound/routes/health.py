# Rutas de salud - /health, /metrics

import logging
from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from insightpilot import __version__
from insightpilot.adapters.inbound.dependencies import AppDependencies, get_deps
from insightpilot.core.domain.responses import APIResponse, HealthData
from insightpilot.utils.logging import token_counter
from insightpilot.utils.metrics import get_metrics

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/")
async def root():
    """Root endpoint - status básico"""
    return {"status": "ok", "version": __version__}


@router.get("/health", response_model=APIResponse[HealthData])
async def health(deps: AppDependencies = Depends(get_deps)):
    """Health check básico"""
    connections = len(deps.registry)
    sessions = len(deps.session_manager)
    metrics = get_metrics()
    metrics.set_connections(connections)
    metrics.set_active_sessions(sessions)
    return APIResponse.ok(
        HealthData(
            status="ok",
            store=deps.store.is_connected(),
            connections=connections,
            sessions=sessions,
        )
    )


@router.get("/metrics")
async def metrics_json():
    """Métricas en formato JSON"""
    return {**get_metrics().get_metrics(), "tokens": token_counter.get_summary()}


@router.get("/metrics/prometheus", response_class=PlainTextResponse)
async def metrics_prometheus():
    """Métricas en formato Prometheus"""
    return get_metrics().get_prometheus_format()
