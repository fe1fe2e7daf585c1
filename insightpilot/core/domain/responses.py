# Modelos de respuesta estandarizados para la API

from typing import TYPE_CHECKING, List, Optional, Generic, TypeVar
from pydantic import BaseModel

if TYPE_CHECKING:
    from insightpilot.core.domain.errors import InsightPilotError

T = TypeVar("T")


class ErrorDetail(BaseModel):
    """Detalle de error para respuestas"""

    code: str
    message: str
    details: Optional[dict] = None


class APIResponse(BaseModel, Generic[T]):
    """Respuesta estándar de la API"""

    success: bool
    data: Optional[T] = None
    error: Optional[ErrorDetail] = None

    @classmethod
    def ok(cls, data: T = None) -> "APIResponse[T]":
        """Crea respuesta exitosa"""
        return cls(success=True, data=data)

    @classmethod
    def from_exception(cls, exc: "InsightPilotError") -> "APIResponse[None]":
        """Crea respuesta desde excepción InsightPilotError"""
        return cls(
            success=False,
            error=ErrorDetail(
                code=exc.code, message=exc.message, details=exc.details
            ),
        )


# DTOs específicos para cada endpoint


class ConnectionData(BaseModel):
    """Perfil de conexión sin credenciales"""

    id: str
    name: str
    kind: str
    host: str
    port: int
    database: str
    username: str
    status: str
    revision: int = 0


class ProbeData(BaseModel):
    """Resultado de probar una conexión"""

    id: str
    success: bool
    status: str


class TablesData(BaseModel):
    """Tablas disponibles en una conexión activa"""

    id: str
    tables: List[str]


class SessionData(BaseModel):
    """Datos de sesión"""

    session_id: str


class ApiKeyData(BaseModel):
    """Estado de la API key del traductor (nunca el valor)"""

    configured: bool


class HealthData(BaseModel):
    """Datos de health check"""

    status: str
    store: bool
    connections: int
    sessions: int


class ResultData(BaseModel):
    """Resultado tabular de un turno"""

    columns: List[str]
    rows: List[dict]
    row_count: int


class TurnData(BaseModel):
    """Turno de una sesión; error lleva el fallo de ejecución si lo hubo"""

    id: str
    utterance: str
    connection_id: str
    query: Optional[str] = None
    result: Optional[ResultData] = None
    error: Optional[ErrorDetail] = None
    duration_ms: float
    timestamp: str
