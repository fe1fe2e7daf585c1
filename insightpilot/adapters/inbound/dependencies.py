# Inyección de dependencias para FastAPI

import logging
from typing import Optional

from insightpilot.adapters.factory import DependencyContainer
from insightpilot.core.services.catalog import TableCatalog
from insightpilot.core.services.probe import ConnectionProbe
from insightpilot.core.services.registry import ConnectionRegistry
from insightpilot.core.services.session_manager import SessionManager
from insightpilot.core.ports.store_port import StorePort

logger = logging.getLogger(__name__)


class AppDependencies:
    """
    Contenedor de dependencias de la aplicación.
    Singleton que se inicializa una vez y provee dependencias a los endpoints.
    """

    _instance: Optional["AppDependencies"] = None

    def __init__(self, container: Optional[DependencyContainer] = None):
        self.container = container or DependencyContainer()

    @classmethod
    def get_instance(cls) -> "AppDependencies":
        """Obtiene la instancia singleton"""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset para testing"""
        cls._instance = None

    # Propiedades con lazy loading

    @property
    def store(self) -> StorePort:
        return self.container.store

    @property
    def registry(self) -> ConnectionRegistry:
        return self.container.registry

    @property
    def probe(self) -> ConnectionProbe:
        return self.container.probe

    @property
    def catalog(self) -> TableCatalog:
        return self.container.catalog

    @property
    def session_manager(self) -> SessionManager:
        return self.container.session_manager

    def initialize_all(self) -> None:
        """Pre-carga todas las dependencias (para startup)"""
        _ = self.registry
        _ = self.probe
        _ = self.catalog
        _ = self.session_manager
        logger.info("Todas las dependencias inicializadas")


# Funciones para FastAPI Depends()

def get_deps() -> AppDependencies:
    """Obtiene el contenedor de dependencias"""
    return AppDependencies.get_instance()
