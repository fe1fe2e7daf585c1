# Fábrica - Crea los servicios del núcleo con sus adaptadores inyectados

import logging
from typing import Callable, Optional

from insightpilot.config.settings import settings
from insightpilot.adapters.outbound.database import get_database_adapter
from insightpilot.adapters.outbound.llm import get_llm
from insightpilot.adapters.outbound.store import get_store
from insightpilot.core.ports.database_port import DatabasePort
from insightpilot.core.ports.store_port import StorePort
from insightpilot.core.ports.translator_port import TranslatorPort
from insightpilot.core.services.catalog import TableCatalog
from insightpilot.core.services.probe import ConnectionProbe
from insightpilot.core.services.registry import ConnectionRegistry
from insightpilot.core.services.session_manager import SessionManager
from insightpilot.core.services.translator import LLMTranslator, RuleBasedTranslator

logger = logging.getLogger(__name__)


def get_translator(api_key: Optional[str] = None) -> TranslatorPort:
    """Traductor LLM si hay API key; si no, o si falla, el de reglas"""
    if not api_key:
        return RuleBasedTranslator()
    try:
        llm = get_llm(api_key)
        logger.info(f"Traductor LLM: {llm.get_model_name()}")
        return LLMTranslator(llm)
    except Exception as e:
        logger.warning(f"LLM no disponible, usando reglas: {str(e)[:80]}")
        return RuleBasedTranslator()


class DependencyContainer:
    """Contenedor de dependencias. Crea e inyecta todas las dependencias concretas."""

    def __init__(
        self,
        store: Optional[StorePort] = None,
        adapter_factory: Optional[Callable[..., DatabasePort]] = None,
        translator_factory: Optional[Callable[[Optional[str]], TranslatorPort]] = None,
    ):
        self._store = store
        self.adapter_factory = adapter_factory or get_database_adapter
        self.translator_factory = translator_factory or get_translator
        self._registry = None
        self._probe = None
        self._catalog = None
        self._session_manager = None

    @property
    def store(self) -> StorePort:
        if self._store is None:
            self._store = get_store(
                settings.store.backend,
                path=settings.store.path,
                redis_url=settings.store.redis_url,
                prefix=settings.store.prefix,
            )
        return self._store

    @property
    def registry(self) -> ConnectionRegistry:
        if self._registry is None:
            self._registry = ConnectionRegistry(self.store)
        return self._registry

    @property
    def probe(self) -> ConnectionProbe:
        if self._probe is None:
            self._probe = ConnectionProbe(
                self.registry,
                adapter_factory=self.adapter_factory,
                timeout=settings.probe.timeout,
            )
        return self._probe

    @property
    def catalog(self) -> TableCatalog:
        if self._catalog is None:
            self._catalog = TableCatalog(
                self.registry,
                adapter_factory=self.adapter_factory,
                timeout=settings.query.timeout,
            )
        return self._catalog

    @property
    def session_manager(self) -> SessionManager:
        if self._session_manager is None:
            self._session_manager = SessionManager(
                self.registry,
                translator_factory=self.translator_factory,
                adapter_factory=self.adapter_factory,
                timeout=settings.query.timeout,
                fallback_api_key=settings.ai.openai_api_key,
                max_sessions=settings.sessions.max_sessions,
                idle_ttl=settings.sessions.idle_ttl,
                max_turns=settings.sessions.max_turns,
            )
        return self._session_manager

