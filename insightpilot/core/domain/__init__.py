# Core Domain - Entidades de negocio

from insightpilot.core.domain.connection import (
    BackendKind,
    Dialect,
    ConnectionStatus,
    ConnectionProfile,
    DEFAULT_PORTS,
)
from insightpilot.core.domain.query import TranslationRequest, TranslationResult
from insightpilot.core.domain.results import ResultSet, Scalar
from insightpilot.core.domain.session import ChatTurn, TurnState
from insightpilot.core.domain.errors import (
    InsightPilotError,
    ValidationError,
    NotFoundError,
    AlreadyInProgressError,
    SessionBusyError,
    NoActiveConnectionError,
    BackendExecutionError,
    NothingToExportError,
    StoreError,
)
from insightpilot.core.domain.responses import (
    APIResponse,
    ErrorDetail,
    ConnectionData,
    ProbeData,
    SessionData,
    TablesData,
    ApiKeyData,
    HealthData,
    ResultData,
    TurnData,
)

__all__ = [
    # Entidades
    "BackendKind",
    "Dialect",
    "ConnectionStatus",
    "ConnectionProfile",
    "DEFAULT_PORTS",
    "TranslationRequest",
    "TranslationResult",
    "ResultSet",
    "Scalar",
    "ChatTurn",
    "TurnState",
    # Errores
    "InsightPilotError",
    "ValidationError",
    "NotFoundError",
    "AlreadyInProgressError",
    "SessionBusyError",
    "NoActiveConnectionError",
    "BackendExecutionError",
    "NothingToExportError",
    "StoreError",
    # Respuestas
    "APIResponse",
    "ErrorDetail",
    "ConnectionData",
    "ProbeData",
    "SessionData",
    "TablesData",
    "ApiKeyData",
    "HealthData",
    "ResultData",
    "TurnData",
]
