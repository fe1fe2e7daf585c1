# Sesión de consultas: pregunta -> SQL -> ejecución -> turno

import asyncio
import logging
import time
from typing import Callable, List, Optional, Tuple
from uuid import uuid4

from insightpilot.core.domain.connection import ConnectionProfile
from insightpilot.core.domain.errors import (
    BackendExecutionError,
    NoActiveConnectionError,
    NotFoundError,
    SessionBusyError,
)
from insightpilot.core.domain.query import TranslationRequest
from insightpilot.core.domain.results import ResultSet
from insightpilot.core.domain.session import BUSY_STATES, ChatTurn, TurnState
from insightpilot.core.ports.database_port import DatabasePort
from insightpilot.core.ports.translator_port import TranslatorPort
from insightpilot.core.services.registry import ConnectionRegistry
from insightpilot.utils.metrics import get_metrics

logger = logging.getLogger(__name__)


class QuerySession:
    """
    Conversación de un usuario contra una conexión activa.

    Flujo de ask():
    1. Resolver conexión (debe estar 'connected')
    2. Traducir la pregunta a SQL
    3. Ejecutar en un hilo con timeout
    4. Registrar el turno

    Una sola consulta a la vez por sesión.
    """

    def __init__(
        self,
        registry: ConnectionRegistry,
        translator: TranslatorPort,
        adapter_factory: Callable[..., DatabasePort],
        timeout: float = 30.0,
        session_id: Optional[str] = None,
        max_turns: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.id = session_id or str(uuid4())[:8]
        self.registry = registry
        self.translator = translator
        self.adapter_factory = adapter_factory
        self.timeout = timeout
        self.state = TurnState.IDLE
        self._turns: List[ChatTurn] = []
        # Ventana deslizante: solo los últimos N turnos
        self.max_turns = max_turns
        self.clock = clock
        self.last_used = clock()

    @property
    def turns(self) -> Tuple[ChatTurn, ...]:
        return tuple(self._turns)

    @property
    def busy(self) -> bool:
        return self.state in BUSY_STATES

    def get_turn(self, turn_id: str) -> ChatTurn:
        for turn in self._turns:
            if turn.id == turn_id:
                return turn
        raise NotFoundError(turn_id, resource="turn")

    async def ask(
        self, connection_id: str, utterance: str, table_hint: Optional[str] = None
    ) -> ChatTurn:
        if self.busy:
            get_metrics().record_ask(0.0, "rejected")
            raise SessionBusyError(self.id)
        # Marcar ocupada antes del primer await
        self.state = TurnState.TRANSLATING
        self.last_used = self.clock()
        start = time.time()

        try:
            profile = self._resolve(connection_id)

            # 1. Traducir
            request = TranslationRequest(utterance, table_hint, profile.kind)
            translation = await asyncio.to_thread(self.translator.translate_request, request)
            logger.info(f"[{self.id}] SQL ({translation.strategy}): {translation.query[:100]}")

            # 2. Ejecutar
            self.state = TurnState.EXECUTING
            result, error = await self._execute(profile, translation.query)

            turn = ChatTurn(
                utterance=utterance,
                connection_id=connection_id,
                query=translation.query,
                result=result,
                error=error,
                duration_ms=(time.time() - start) * 1000,
            )
            self._turns.append(turn)
            if self.max_turns and len(self._turns) > self.max_turns:
                self._turns = self._turns[-self.max_turns :]
            self.state = TurnState.COMPLETED if turn.is_success else TurnState.FAILED
            get_metrics().record_ask(turn.duration_ms, self.state.value)
            return turn
        except NoActiveConnectionError:
            get_metrics().record_ask((time.time() - start) * 1000, "rejected")
            raise
        finally:
            self.last_used = self.clock()
            if self.busy:
                self.state = TurnState.FAILED

    def _resolve(self, connection_id: str) -> ConnectionProfile:
        if not connection_id:
            raise NoActiveConnectionError()
        try:
            profile = self.registry.get(connection_id)
        except NotFoundError:
            raise NoActiveConnectionError(connection_id, reason="missing")
        if not profile.is_connected:
            raise NoActiveConnectionError(connection_id, reason=profile.status.value)
        return profile

    async def _execute(
        self, profile: ConnectionProfile, query: str
    ) -> Tuple[Optional[ResultSet], Optional[BackendExecutionError]]:
        """Ejecuta en un hilo. Los errores del driver quedan en el turno."""
        try:
            adapter = self.adapter_factory(profile, timeout=self.timeout)
            raw = await asyncio.wait_for(
                asyncio.to_thread(adapter.execute, query), timeout=self.timeout
            )
        except asyncio.TimeoutError:
            logger.warning(f"[{self.id}] Timeout ejecutando ({self.timeout}s)")
            return None, BackendExecutionError(
                f"La consulta excedió el tiempo límite ({self.timeout:g}s).",
                query=query,
                reason="timeout",
            )
        except Exception as e:
            logger.error(f"[{self.id}] Error ejecutando: {e}")
            return None, BackendExecutionError(str(e), query=query)

        if "error" in raw:
            return None, BackendExecutionError(raw["error"], query=query)

        try:
            return ResultSet.from_driver(raw.get("columns", []), raw.get("data", [])), None
        except ValueError as e:
            return None, BackendExecutionError(str(e), query=query, reason="result")
