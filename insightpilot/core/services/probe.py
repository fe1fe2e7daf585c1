# Prueba de conectividad de perfiles

import asyncio
import logging
import time
from typing import Callable, Dict, Set

from insightpilot.core.domain.connection import ConnectionProfile, ConnectionStatus
from insightpilot.core.domain.errors import AlreadyInProgressError, ValidationError
from insightpilot.core.ports.database_port import DatabasePort
from insightpilot.core.services.registry import ConnectionRegistry
from insightpilot.utils.metrics import get_metrics

logger = logging.getLogger(__name__)

AdapterFactory = Callable[..., DatabasePort]


class ConnectionProbe:
    """
    Prueba perfiles contra su backend.

    - Un perfil en prueba queda en 'testing' y siempre termina en
      'connected' o 'disconnected'.
    - Perfiles distintos se prueban en paralelo; un segundo test sobre el
      mismo perfil se rechaza con AlreadyInProgressError.
    - El resultado se descarta si el perfil fue editado durante la prueba.
    """

    def __init__(
        self,
        registry: ConnectionRegistry,
        adapter_factory: AdapterFactory,
        timeout: float = 10.0,
    ):
        self.registry = registry
        self.adapter_factory = adapter_factory
        self.timeout = timeout
        self._inflight: Dict[str, asyncio.Task] = {}
        self._cancel_requested: Set[str] = set()

    def in_progress(self, profile_id: str) -> bool:
        return profile_id in self._inflight

    async def test(self, profile_id: str) -> bool:
        """Prueba un perfil. Retorna True si quedó 'connected'."""
        if profile_id in self._inflight:
            raise AlreadyInProgressError(profile_id)

        profile = self.registry.get(profile_id)
        try:
            profile.validate()
        except ValidationError:
            self.registry.set_status(profile_id, ConnectionStatus.DISCONNECTED)
            raise

        profile = self.registry.begin_probe(profile_id)
        task = asyncio.create_task(self._run(profile))
        self._inflight[profile_id] = task
        logger.info(f"Probando conexión: {profile.id} {profile.describe()}")

        try:
            return await task
        except asyncio.CancelledError:
            # La tarea pudo cancelarse antes de arrancar: _run no fijó el estado
            task.cancel()
            self.registry.set_status(
                profile_id, ConnectionStatus.DISCONNECTED, expected_revision=profile.revision
            )
            if profile_id in self._cancel_requested:
                self._cancel_requested.discard(profile_id)
                logger.info(f"Prueba cancelada: {profile_id}")
                return False
            raise
        finally:
            self._inflight.pop(profile_id, None)
            self._cancel_requested.discard(profile_id)

    def cancel(self, profile_id: str) -> bool:
        """Cancela una prueba en curso. Retorna False si no había ninguna."""
        task = self._inflight.get(profile_id)
        if task is None or task.done():
            return False
        self._cancel_requested.add(profile_id)
        task.cancel()
        return True

    async def _run(self, profile: ConnectionProfile) -> bool:
        start = time.time()
        status = ConnectionStatus.DISCONNECTED
        try:
            adapter = self.adapter_factory(profile, timeout=self.timeout)
            ok = await asyncio.wait_for(
                asyncio.to_thread(adapter.test_connection), timeout=self.timeout
            )
            if ok:
                status = ConnectionStatus.CONNECTED
            return bool(ok)
        except asyncio.TimeoutError:
            logger.warning(f"Timeout probando {profile.id} ({self.timeout}s)")
            return False
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Error probando {profile.id}: {e}")
            return False
        finally:
            duration_ms = (time.time() - start) * 1000
            get_metrics().record_probe(duration_ms, status.value)
            logger.info(f"Prueba {profile.id}: {status.value} ({duration_ms:.0f}ms)")
            # Si el store falla el estado ya quedó aplicado en memoria
            self.registry.set_status(
                profile.id, status, expected_revision=profile.revision
            )
