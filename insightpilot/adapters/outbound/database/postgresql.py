# Adaptador para PostgreSQL

import logging
import math

from insightpilot.adapters.outbound.database.base import DatabaseAdapter

logger = logging.getLogger(__name__)


class PostgreSQLAdapter(DatabaseAdapter):
    """Adaptador para bases de datos PostgreSQL (solo lectura)"""

    label = "PostgreSQL"
    tables_query = """
        SELECT table_schema || '.' || table_name FROM information_schema.tables
        WHERE table_type = 'BASE TABLE'
        AND table_schema NOT IN ('pg_catalog', 'information_schema')
        ORDER BY table_schema, table_name
    """

    def connect(self):
        import psycopg2

        conn = psycopg2.connect(
            host=self.host,
            port=self.port,
            dbname=self.database,
            user=self.user,
            password=self.password,
            connect_timeout=max(1, math.ceil(self.timeout)),
        )
        conn.set_session(readonly=True)
        return conn

    def _prepare(self, cursor):
        cursor.execute(f"SET statement_timeout = {int(self.timeout * 1000)};")
