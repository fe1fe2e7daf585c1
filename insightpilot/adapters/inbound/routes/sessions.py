# Rutas de sesión - /sessions

import time
import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from insightpilot.adapters.inbound.dependencies import AppDependencies, get_deps
from insightpilot.core.domain.errors import InsightPilotError
from insightpilot.core.domain.responses import APIResponse, SessionData, TurnData
from insightpilot.core.services.export import to_delimited_text
from insightpilot.utils.metrics import get_metrics

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sessions", tags=["Session"])


class AskRequest(BaseModel):
    connection_id: str = Field(..., min_length=1, description="Conexión activa a consultar")
    query: str = Field(..., min_length=1, max_length=1000, description="Pregunta en lenguaje natural")
    table: Optional[str] = Field(None, description="Tabla sugerida (opcional)")


@router.post("", response_model=APIResponse[SessionData], status_code=201)
async def create_session(deps: AppDependencies = Depends(get_deps)):
    """Crea una nueva sesión de consultas"""
    session = deps.session_manager.create_session()
    return APIResponse.ok(SessionData(session_id=session.id))


@router.delete("/{session_id}")
async def delete_session(session_id: str, deps: AppDependencies = Depends(get_deps)):
    """Elimina una sesión existente"""
    deps.session_manager.delete(session_id)
    return {"deleted": True}


@router.get("/{session_id}/turns", response_model=APIResponse[List[TurnData]])
async def list_turns(session_id: str, deps: AppDependencies = Depends(get_deps)):
    session = deps.session_manager.get(session_id)
    return APIResponse.ok([TurnData(**turn.to_dict()) for turn in session.turns])


@router.post("/{session_id}/ask", response_model=APIResponse[TurnData])
async def ask(
    session_id: str,
    request: AskRequest,
    deps: AppDependencies = Depends(get_deps),
):
    """
    Traduce y ejecuta una pregunta. Los errores de ejecución quedan en el
    turno (campo error); los rechazos responden con su código HTTP.
    """
    metrics = get_metrics()
    start_time = time.time()
    try:
        session = deps.session_manager.get(session_id)
        turn = await session.ask(request.connection_id, request.query, request.table)
    except InsightPilotError:
        metrics.record_request("/sessions/ask", (time.time() - start_time) * 1000, success=False)
        raise
    metrics.record_request("/sessions/ask", (time.time() - start_time) * 1000, success=turn.is_success)
    return APIResponse.ok(TurnData(**turn.to_dict()))


@router.get("/{session_id}/turns/{turn_id}/export", response_class=PlainTextResponse)
async def export_turn(
    session_id: str,
    turn_id: str,
    delimiter: str = Query(",", description="Un único carácter"),
    deps: AppDependencies = Depends(get_deps),
):
    """Exporta el resultado de un turno como texto delimitado"""
    turn = deps.session_manager.get(session_id).get_turn(turn_id)
    text = to_delimited_text(turn.result, delimiter=delimiter)
    return PlainTextResponse(
        text,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{turn_id}.csv"'},
    )
