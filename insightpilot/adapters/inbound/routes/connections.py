# Rutas de conexiones - /connections

import logging
import time
from typing import List, Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from insightpilot.adapters.inbound.dependencies import AppDependencies, get_deps
from insightpilot.core.domain.connection import ConnectionProfile, ConnectionStatus
from insightpilot.core.domain.errors import NotFoundError
from insightpilot.core.domain.responses import (
    APIResponse,
    ConnectionData,
    ProbeData,
    TablesData,
)
from insightpilot.utils.metrics import get_metrics

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/connections", tags=["Connections"])


# Modelos de transferencia de datos
class ConnectionCreate(BaseModel):
    name: str = Field("", max_length=200, description="Nombre para mostrar")
    kind: str = Field(..., description="postgresql, mysql o sqlserver")
    host: str
    port: Optional[int] = Field(None, description="Puerto (por defecto el del motor)")
    database: str
    username: str
    secret: str = Field(..., description="Contraseña (nunca se devuelve)")


class ConnectionUpdate(BaseModel):
    name: Optional[str] = None
    kind: Optional[str] = None
    host: Optional[str] = None
    port: Optional[int] = None
    database: Optional[str] = None
    username: Optional[str] = None
    secret: Optional[str] = None
    status: Optional[str] = None


def to_data(profile: ConnectionProfile) -> ConnectionData:
    return ConnectionData(**profile.to_dict(include_secret=False))


@router.get("", response_model=APIResponse[List[ConnectionData]])
async def list_connections(deps: AppDependencies = Depends(get_deps)):
    """Lista los perfiles en orden de creación"""
    return APIResponse.ok([to_data(p) for p in deps.registry.list()])


@router.post("", response_model=APIResponse[ConnectionData], status_code=201)
async def add_connection(
    request: ConnectionCreate, deps: AppDependencies = Depends(get_deps)
):
    """Crea un perfil nuevo en estado 'disconnected'"""
    profile = deps.registry.add(**request.model_dump())
    get_metrics().set_connections(len(deps.registry))
    return APIResponse.ok(to_data(profile))


@router.get("/{connection_id}", response_model=APIResponse[ConnectionData])
async def get_connection(connection_id: str, deps: AppDependencies = Depends(get_deps)):
    return APIResponse.ok(to_data(deps.registry.get(connection_id)))


@router.patch("/{connection_id}", response_model=APIResponse[ConnectionData])
async def update_connection(
    connection_id: str,
    request: ConnectionUpdate,
    deps: AppDependencies = Depends(get_deps),
):
    """Actualiza solo los campos enviados"""
    fields = request.model_dump(exclude_unset=True)
    profile = deps.registry.update(connection_id, **fields)
    return APIResponse.ok(to_data(profile))


@router.delete("/{connection_id}")
async def delete_connection(connection_id: str, deps: AppDependencies = Depends(get_deps)):
    deps.probe.cancel(connection_id)
    deps.registry.delete(connection_id)
    get_metrics().set_connections(len(deps.registry))
    return {"deleted": True}


@router.post("/{connection_id}/test", response_model=APIResponse[ProbeData])
async def test_connection(connection_id: str, deps: AppDependencies = Depends(get_deps)):
    """Prueba la conexión y retorna el estado final"""
    start = time.time()
    success = await deps.probe.test(connection_id)
    try:
        status = deps.registry.get(connection_id).status.value
    except NotFoundError:
        # Eliminada durante la prueba
        success = False
        status = ConnectionStatus.DISCONNECTED.value
    logger.info(f"Test {connection_id}: {status} ({(time.time() - start) * 1000:.0f}ms)")
    return APIResponse.ok(ProbeData(id=connection_id, success=success, status=status))


@router.delete("/{connection_id}/test")
async def cancel_test(connection_id: str, deps: AppDependencies = Depends(get_deps)):
    """Cancela una prueba en curso"""
    return {"cancelled": deps.probe.cancel(connection_id)}


@router.get("/{connection_id}/tables", response_model=APIResponse[TablesData])
async def list_tables(connection_id: str, deps: AppDependencies = Depends(get_deps)):
    """Tablas de una conexión activa (para elegir la tabla sugerida)"""
    tables = await deps.catalog.list_tables(connection_id)
    return APIResponse.ok(TablesData(id=connection_id, tables=tables))
