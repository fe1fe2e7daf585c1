# Catálogo de tablas de una conexión activa

import asyncio
import logging
from typing import Callable, List

from insightpilot.core.domain.errors import (
    BackendExecutionError,
    NoActiveConnectionError,
)
from insightpilot.core.ports.database_port import DatabasePort
from insightpilot.core.services.registry import ConnectionRegistry

logger = logging.getLogger(__name__)


class TableCatalog:
    """Lista las tablas de un perfil 'connected' para elegir la tabla sugerida"""

    def __init__(
        self,
        registry: ConnectionRegistry,
        adapter_factory: Callable[..., DatabasePort],
        timeout: float = 10.0,
    ):
        self.registry = registry
        self.adapter_factory = adapter_factory
        self.timeout = timeout

    async def list_tables(self, profile_id: str) -> List[str]:
        profile = self.registry.get(profile_id)
        if not profile.is_connected:
            raise NoActiveConnectionError(profile_id, reason=profile.status.value)

        adapter = self.adapter_factory(profile, timeout=self.timeout)
        try:
            tables = await asyncio.wait_for(
                asyncio.to_thread(adapter.list_tables), timeout=self.timeout
            )
        except asyncio.TimeoutError:
            logger.warning(f"Timeout listando tablas de {profile_id} ({self.timeout}s)")
            raise BackendExecutionError(
                f"El listado de tablas excedió el tiempo límite ({self.timeout:g}s).",
                reason="timeout",
            )
        logger.info(f"Tablas de {profile_id}: {len(tables)}")
        return tables
