# Entidades de Session

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional
from uuid import uuid4

from insightpilot.core.domain.errors import BackendExecutionError
from insightpilot.core.domain.results import ResultSet


class TurnState(str, Enum):
    """Estado de una llamada a ask()"""

    IDLE = "idle"
    TRANSLATING = "translating"
    EXECUTING = "executing"
    COMPLETED = "completed"
    FAILED = "failed"


BUSY_STATES = (TurnState.TRANSLATING, TurnState.EXECUTING)


@dataclass(frozen=True)
class ChatTurn:
    """Intercambio pregunta/respuesta dentro de una sesión"""

    utterance: str
    connection_id: str
    query: Optional[str] = None
    result: Optional[ResultSet] = None
    error: Optional[BackendExecutionError] = None
    duration_ms: float = 0.0
    id: str = field(default_factory=lambda: str(uuid4())[:8])
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def is_success(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "utterance": self.utterance,
            "connection_id": self.connection_id,
            "query": self.query,
            "result": self.result.to_dict() if self.result is not None else None,
            "error": self.error.to_dict() if self.error is not None else None,
            "duration_ms": round(self.duration_ms, 2),
            "timestamp": self.timestamp.isoformat(),
        }
