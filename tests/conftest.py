# Configuración central de pytest y fixtures compartidos

import pytest
import os
import sys
import threading
from typing import Any, Dict, List
from unittest.mock import MagicMock

# Asegurar que el directorio raíz esté en el path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from insightpilot.adapters.outbound.store import MemoryStore
from insightpilot.core.domain.connection import ConnectionStatus
from insightpilot.core.services.registry import ConnectionRegistry
from insightpilot.core.services.translator import RuleBasedTranslator
from insightpilot.utils.metrics import get_metrics


# MARKERS PERSONALIZADOS

def pytest_configure(config):
    """Registrar markers personalizados"""
    config.addinivalue_line(
        "markers", "unit: Tests unitarios rápidos (sin servicios externos)"
    )
    config.addinivalue_line(
        "markers", "integration: Tests de integración (requieren Redis/DB)"
    )


# FAKES DE ADAPTADORES

class FakeAdapter:
    """Adaptador de base de datos falso: respuestas programables y bloqueo opcional"""

    def __init__(self, factory: "FakeAdapterFactory", profile, timeout: float):
        self.factory = factory
        self.profile = profile
        self.timeout = timeout

    def _wait(self):
        self.factory.started.set()
        if self.factory.gate is not None:
            self.factory.gate.wait(5)

    def test_connection(self) -> bool:
        self._wait()
        if isinstance(self.factory.reachable, Exception):
            raise self.factory.reachable
        return self.factory.reachable

    def execute(self, query: str) -> Dict[str, Any]:
        self._wait()
        self.factory.queries.append(query)
        if isinstance(self.factory.result, Exception):
            raise self.factory.result
        return self.factory.result

    def list_tables(self) -> List[str]:
        self._wait()
        if isinstance(self.factory.tables, Exception):
            raise self.factory.tables
        return list(self.factory.tables)


class FakeAdapterFactory:
    """Se inyecta como adapter_factory: (profile, timeout=...) -> adaptador"""

    def __init__(self, reachable=True, result=None):
        self.reachable = reachable
        self.result = result if result is not None else {
            "columns": ["id", "name"],
            "data": [(1, "Ana"), (2, "Luis")],
            "row_count": 2,
        }
        self.tables = ["public.orders", "public.users"]
        self.gate = None
        self.started = threading.Event()
        self.queries: List[str] = []
        self.profiles = []

    def block(self):
        """Las llamadas quedan bloqueadas hasta release()"""
        self.gate = threading.Event()

    def release(self):
        if self.gate is not None:
            self.gate.set()

    def __call__(self, profile, timeout: float = 10.0):
        self.profiles.append(profile)
        return FakeAdapter(self, profile, timeout)


# FIXTURES

@pytest.fixture(autouse=True)
def reset_metrics():
    get_metrics().reset()
    yield


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def registry(store):
    return ConnectionRegistry(store)


@pytest.fixture
def adapter_factory():
    factory = FakeAdapterFactory()
    yield factory
    factory.release()


@pytest.fixture
def mock_llm():
    """Mock del LLM para evitar llamadas reales (costosas y lentas)"""
    mock = MagicMock()
    mock.invoke.return_value = MagicMock(content="SELECT id, name FROM users LIMIT 100;")
    return mock


@pytest.fixture
def translator():
    return RuleBasedTranslator(default_table="users")


@pytest.fixture
def profile_fields():
    return {
        "name": "Ventas",
        "kind": "postgresql",
        "host": "db.local",
        "database": "ventas",
        "username": "lector",
        "secret": "s3cr3t",
    }


@pytest.fixture
def profile(registry, profile_fields):
    return registry.add(**profile_fields)


@pytest.fixture
def connected_profile(registry, profile):
    registry.set_status(profile.id, ConnectionStatus.CONNECTED)
    return registry.get(profile.id)


class FailingStore(MemoryStore):
    """Store que falla en set() cuando fail=True"""

    def __init__(self):
        super().__init__()
        self.fail = False

    def set(self, key, value):
        if self.fail:
            from insightpilot.core.domain.errors import StoreError

            raise StoreError("disco lleno", backend="memory")
        super().set(key, value)


@pytest.fixture
def failing_store():
    return FailingStore()
