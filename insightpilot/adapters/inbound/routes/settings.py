# Rutas de configuración - /settings

import logging
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from insightpilot.adapters.inbound.dependencies import AppDependencies, get_deps
from insightpilot.core.domain.responses import APIResponse, ApiKeyData

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/settings", tags=["Settings"])


class ApiKeyRequest(BaseModel):
    api_key: str = ""


@router.get("/api-key", response_model=APIResponse[ApiKeyData])
async def get_api_key(deps: AppDependencies = Depends(get_deps)):
    """Indica si hay API key guardada (nunca la devuelve)"""
    return APIResponse.ok(ApiKeyData(configured=bool(deps.registry.openai_api_key)))


@router.put("/api-key", response_model=APIResponse[ApiKeyData])
async def set_api_key(request: ApiKeyRequest, deps: AppDependencies = Depends(get_deps)):
    """Guarda la API key; vacía la elimina. Aplica a sesiones nuevas."""
    deps.registry.set_openai_api_key(request.api_key)
    return APIResponse.ok(ApiKeyData(configured=bool(deps.registry.openai_api_key)))
