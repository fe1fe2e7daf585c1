# Gestor de sesiones de consulta (en memoria)

import logging
import threading
import time
from typing import Callable, Dict, List, Optional

from insightpilot.core.domain.errors import NotFoundError
from insightpilot.core.ports.database_port import DatabasePort
from insightpilot.core.ports.translator_port import TranslatorPort
from insightpilot.core.services.query_session import QuerySession
from insightpilot.core.services.registry import ConnectionRegistry
from insightpilot.utils.metrics import get_metrics

logger = logging.getLogger(__name__)


# Crea, busca y elimina sesiones; no persisten entre reinicios.
# Acotadas: expiran por inactividad y, al llegar a max_sessions, se descarta
# la menos usada. Una sesión ocupada nunca se descarta.
class SessionManager:
    def __init__(
        self,
        registry: ConnectionRegistry,
        translator_factory: Callable[[Optional[str]], TranslatorPort],
        adapter_factory: Callable[..., DatabasePort],
        timeout: float = 30.0,
        fallback_api_key: str = "",
        max_sessions: int = 100,
        idle_ttl: float = 3600.0,
        max_turns: Optional[int] = 50,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.registry = registry
        self.translator_factory = translator_factory
        self.adapter_factory = adapter_factory
        self.timeout = timeout
        self.fallback_api_key = fallback_api_key
        self.max_sessions = max_sessions
        self.idle_ttl = idle_ttl
        self.max_turns = max_turns
        self.clock = clock
        self._sessions: Dict[str, QuerySession] = {}
        self._lock = threading.Lock()

    # La API key guardada tiene prioridad sobre la del entorno
    def _api_key(self) -> str:
        return self.registry.openai_api_key or self.fallback_api_key

    def _new_session(self, translator: TranslatorPort) -> QuerySession:
        return QuerySession(
            self.registry,
            translator,
            adapter_factory=self.adapter_factory,
            timeout=self.timeout,
            max_turns=self.max_turns,
            clock=self.clock,
        )

    def _expired(self, session: QuerySession) -> bool:
        if session.busy or not self.idle_ttl:
            return False
        return self.clock() - session.last_used > self.idle_ttl

    def _evict(self) -> None:
        """Quita sesiones expiradas y, si sobra, las menos usadas (con el lock tomado)"""
        for session_id in [s.id for s in self._sessions.values() if self._expired(s)]:
            del self._sessions[session_id]
            logger.debug(f"Sesión expirada: {session_id}")

        if not self.max_sessions:
            return
        idle = sorted(
            (s for s in self._sessions.values() if not s.busy),
            key=lambda s: s.last_used,
        )
        while len(self._sessions) >= self.max_sessions and idle:
            oldest = idle.pop(0)
            del self._sessions[oldest.id]
            logger.debug(f"Sesión descartada por límite: {oldest.id}")

    def create_session(self) -> QuerySession:
        translator = self.translator_factory(self._api_key() or None)
        session = self._new_session(translator)
        with self._lock:
            self._evict()
            while session.id in self._sessions:
                session = self._new_session(translator)
            self._sessions[session.id] = session
            get_metrics().set_active_sessions(len(self._sessions))
        logger.debug(f"Nueva sesión: {session.id} ({type(translator).__name__})")
        return session

    def get(self, session_id: str) -> QuerySession:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is not None and self._expired(session):
                del self._sessions[session_id]
                get_metrics().set_active_sessions(len(self._sessions))
                logger.debug(f"Sesión expirada: {session_id}")
                session = None
        if session is None:
            raise NotFoundError(session_id, resource="session")
        return session

    def delete(self, session_id: str) -> None:
        with self._lock:
            if self._sessions.pop(session_id, None) is not None:
                logger.debug(f"Sesión eliminada: {session_id}")
            get_metrics().set_active_sessions(len(self._sessions))

    def list_ids(self) -> List[str]:
        return list(self._sessions)

    def __len__(self) -> int:
        return len(self._sessions)
