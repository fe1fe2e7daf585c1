# Adaptador para MySQL

import logging
import math

from insightpilot.adapters.outbound.database.base import DatabaseAdapter

logger = logging.getLogger(__name__)


class MySQLAdapter(DatabaseAdapter):
    """Adaptador para bases de datos MySQL/MariaDB"""

    label = "MySQL"
    tables_query = """
        SELECT table_name FROM information_schema.tables
        WHERE table_schema = DATABASE() AND table_type = 'BASE TABLE'
        ORDER BY table_name
    """

    def connect(self):
        import pymysql  # type: ignore[import-not-found]

        seconds = max(1, math.ceil(self.timeout))
        return pymysql.connect(
            host=self.host,
            port=self.port,
            user=self.user,
            password=self.password,
            database=self.database,
            charset="utf8mb4",
            connect_timeout=seconds,
            read_timeout=seconds,
            write_timeout=seconds,
        )
