# Adaptador para SQL Server

import logging
import math

from insightpilot.adapters.outbound.database.base import DatabaseAdapter
from insightpilot.core.domain.connection import ConnectionProfile

logger = logging.getLogger(__name__)

ODBC_DRIVER = "ODBC Driver 17 for SQL Server"


def _odbc_value(value: str) -> str:
    """Escapa un valor para el connection string ODBC"""
    return "{" + str(value).replace("}", "}}") + "}"


class SQLServerAdapter(DatabaseAdapter):
    """Adaptador para bases de datos Microsoft SQL Server"""

    label = "SQL Server"
    tables_query = """
        SELECT TABLE_SCHEMA + '.' + TABLE_NAME FROM INFORMATION_SCHEMA.TABLES
        WHERE TABLE_TYPE = 'BASE TABLE'
        ORDER BY TABLE_SCHEMA, TABLE_NAME
    """

    def __init__(self, profile: ConnectionProfile, timeout: float = 10.0, driver: str = ODBC_DRIVER):
        super().__init__(profile, timeout)
        self.driver = driver

    def connection_string(self) -> str:
        return (
            f"DRIVER={{{self.driver}}};"
            f"SERVER={self.host},{self.port};"
            f"DATABASE={_odbc_value(self.database)};"
            f"UID={_odbc_value(self.user)};"
            f"PWD={_odbc_value(self.password)}"
        )

    def connect(self):
        import pyodbc  # type: ignore[import-not-found]

        seconds = max(1, math.ceil(self.timeout))
        conn = pyodbc.connect(self.connection_string(), timeout=seconds)
        # Timeout por sentencia
        conn.timeout = seconds
        return conn
