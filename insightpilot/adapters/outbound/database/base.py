# Interfaz base para adaptadores de base de datos

import logging
from abc import abstractmethod
from typing import Any, Dict, List

from insightpilot.core.domain.connection import ConnectionProfile
from insightpilot.core.domain.errors import BackendExecutionError
from insightpilot.core.ports.database_port import DatabasePort

logger = logging.getLogger(__name__)


class DatabaseAdapter(DatabasePort):
    """
    Base para adaptadores de base de datos.
    Los adaptadores concretos implementan connect() y, si lo necesitan,
    _prepare() para fijar timeouts de sentencia.
    """

    label = "Database"
    # Query de catálogo: una fila por tabla, primera columna = nombre
    tables_query = ""

    def __init__(self, profile: ConnectionProfile, timeout: float = 10.0):
        self.host = profile.host
        self.port = profile.port
        self.database = profile.database
        self.user = profile.username
        self.password = profile.secret
        self.timeout = timeout

    @abstractmethod
    def connect(self) -> Any:
        pass

    def _prepare(self, cursor) -> None:
        """Hook previo a cada query (timeouts, modo lectura, etc.)"""
        pass

    def close(self, handle: Any) -> None:
        try:
            handle.close()
        except Exception as e:
            logger.debug(f"{self.label}: error cerrando conexión: {e}")

    def execute(self, query: str) -> Dict[str, Any]:
        """
        Ejecuta una query SQL.

        Returns:
            Dict con columns, data, row_count o error
        """
        handle = None
        try:
            handle = self.connect()
            cursor = handle.cursor()
            try:
                self._prepare(cursor)
                cursor.execute(query)
                if cursor.description:
                    columns = [desc[0] for desc in cursor.description]
                    data = [tuple(row) for row in cursor.fetchall()]
                    return {
                        "columns": columns,
                        "data": data,
                        "row_count": len(data),
                    }
                return {"columns": [], "data": [], "row_count": 0}
            finally:
                cursor.close()
        except Exception as e:
            logger.error(f"{self.label} error: {e}")
            return {"error": str(e)}
        finally:
            if handle is not None:
                self.close(handle)

    def test_connection(self) -> bool:
        result = self.execute("SELECT 1")
        return "error" not in result

    def list_tables(self) -> List[str]:
        """
        Lista las tablas de usuario vía information_schema.

        Raises:
            BackendExecutionError: Si el driver falla
        """
        result = self.execute(self.tables_query)
        if "error" in result:
            raise BackendExecutionError(result["error"], query=self.tables_query)
        return [str(row[0]) for row in result.get("data", [])]
