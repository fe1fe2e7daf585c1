# Adaptadores de base de datos - Factory y re-exports

from insightpilot.core.domain.connection import BackendKind, ConnectionProfile
from insightpilot.adapters.outbound.database.base import DatabaseAdapter
from insightpilot.adapters.outbound.database.postgresql import PostgreSQLAdapter
from insightpilot.adapters.outbound.database.mysql import MySQLAdapter
from insightpilot.adapters.outbound.database.sqlserver import SQLServerAdapter

ADAPTERS = {
    BackendKind.POSTGRESQL: PostgreSQLAdapter,
    BackendKind.MYSQL: MySQLAdapter,
    BackendKind.SQLSERVER: SQLServerAdapter,
}


def get_database_adapter(profile: ConnectionProfile, timeout: float = 10.0) -> DatabaseAdapter:
    """
    Factory para crear el adaptador correcto según el tipo del perfil.

    Args:
        profile: Perfil de conexión
        timeout: Timeout de conexión y de sentencia en segundos

    Returns:
        DatabaseAdapter concreto para el tipo especificado

    Raises:
        ValueError: Si el tipo de DB no está soportado
    """
    adapter_class = ADAPTERS.get(BackendKind(profile.kind))
    if not adapter_class:
        supported = ", ".join(sorted(k.value for k in ADAPTERS))
        raise ValueError(
            f"Tipo de base de datos no soportado: '{profile.kind}'. "
            f"Soportados: {supported}"
        )

    return adapter_class(profile, timeout=timeout)


__all__ = [
    "DatabaseAdapter",
    "PostgreSQLAdapter",
    "MySQLAdapter",
    "SQLServerAdapter",
    "get_database_adapter",
]
