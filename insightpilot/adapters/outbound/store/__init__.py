# Adaptadores de almacenamiento - Factory y re-exports

from insightpilot.core.ports.store_port import StorePort
from insightpilot.adapters.outbound.store.file_store import JsonFileStore
from insightpilot.adapters.outbound.store.memory_store import MemoryStore
from insightpilot.adapters.outbound.store.redis_store import RedisStore


def get_store(backend: str, path: str = None, redis_url: str = None, prefix: str = "insightpilot") -> StorePort:
    """
    Factory para crear el store según configuración.

    Args:
        backend: file, redis o memory
        path: Ruta del archivo JSON (backend file)
        redis_url: URL de Redis (backend redis)
        prefix: Prefijo de claves (backend redis)

    Raises:
        ValueError: Si el backend no está soportado
    """
    backend = backend.lower()
    if backend == "file":
        return JsonFileStore(path)
    if backend == "redis":
        return RedisStore(redis_url, prefix=prefix)
    if backend == "memory":
        return MemoryStore()
    raise ValueError(
        f"Store no soportado: '{backend}'. Soportados: file, memory, redis"
    )


__all__ = ["JsonFileStore", "MemoryStore", "RedisStore", "get_store"]
