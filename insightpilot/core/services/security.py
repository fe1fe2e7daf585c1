# Validación de SQL generado por el LLM: una sola consulta de lectura

import re
import logging
from typing import Dict, List, Optional, Tuple

from insightpilot.core.domain.connection import Dialect

logger = logging.getLogger(__name__)


WRITE_COMMANDS = [
    "INSERT",
    "UPDATE",
    "DELETE",
    "MERGE",
    "UPSERT",
    "INTO",
    "DROP",
    "CREATE",
    "ALTER",
    "TRUNCATE",
    "RENAME",
    "GRANT",
    "REVOKE",
    "EXEC",
    "EXECUTE",
    "CALL",
    "COPY",
    "LOAD",
    "VACUUM",
    "SHUTDOWN",
    "KILL",
]

# Funciones y objetos del sistema por dialecto
DIALECT_BLOCKLIST: Dict[Dialect, List[str]] = {
    Dialect.POSTGRESQL: [
        r"\bpg_read_file\b",
        r"\bpg_read_binary_file\b",
        r"\bpg_ls_dir\b",
        r"\blo_import\b",
        r"\blo_export\b",
        r"\bdblink\w*\b",
        r"\bpg_sleep\w*\b",
        r"\bpg_terminate_backend\b",
        r"\bpg_catalog\.",
        r"\bpg_shadow\b",
        r"\bpg_authid\b",
    ],
    Dialect.MYSQL: [
        r"\bload_file\b",
        r"\bsleep\s*\(",
        r"\bbenchmark\s*\(",
        r"\binto\s+(out|dump)file\b",
        r"\bmysql\.user\b",
    ],
    Dialect.SQLSERVER: [
        r"\bxp_\w+",
        r"\bsp_\w+",
        r"\bopenrowset\b",
        r"\bopendatasource\b",
        r"\bopenquery\b",
        r"\bwaitfor\s+delay\b",
        r"\bsys\.sql_logins\b",
        r"\bmaster\.\.",
    ],
}

# Aplican a todos los dialectos
COMMON_BLOCKLIST = [
    r"\binformation_schema\.",
    r"--",
    r"/\*",
    r"\bunion\s+(all\s+)?select\b",
    r"'\s*or\s+1\s*=\s*1",
]


class SQLValidator:
    """
    Acepta solo un SELECT (o WITH ... SELECT) sin comandos de escritura,
    funciones del sistema ni patrones de inyección.
    """

    def __init__(self):
        self.common = [re.compile(p, re.IGNORECASE) for p in COMMON_BLOCKLIST]
        self.by_dialect = {
            dialect: [re.compile(p, re.IGNORECASE) for p in patterns]
            for dialect, patterns in DIALECT_BLOCKLIST.items()
        }
        self.write_commands = re.compile(
            r"\b(" + "|".join(WRITE_COMMANDS) + r")\b", re.IGNORECASE
        )

    def validate(self, sql: str, dialect: Optional[Dialect] = None) -> Tuple[bool, str]:
        """Valida SQL, retorna (is_safe, reason)"""
        if not sql or not sql.strip():
            return False, "SQL vacío"

        body = self._strip_literals(sql).strip().rstrip(";").strip()

        if not re.match(r"^(SELECT|WITH)\b", body, re.IGNORECASE):
            return False, "Solo se permiten consultas SELECT"

        if ";" in body:
            return False, "Múltiples statements no permitidos"

        match = self.write_commands.search(body)
        if match:
            logger.warning(f"Comando no permitido en SQL generado: {match.group(1).upper()}")
            return False, f"Comando no permitido: {match.group(1).upper()}"

        for pattern in self.common:
            if pattern.search(body):
                return False, "Patrón de SQL injection detectado"

        dialects = [Dialect(dialect)] if dialect else list(self.by_dialect)
        for d in dialects:
            for pattern in self.by_dialect[d]:
                if pattern.search(body):
                    return False, f"Función u objeto del sistema no permitido ({d.value})"

        return True, ""

    @staticmethod
    def _strip_literals(sql: str) -> str:
        """Vacía los literales para que su contenido no dispare reglas"""
        result = re.sub(r"'(?:[^']|'')*'", "''", sql)
        return re.sub(r'"[^"]*"', '""', result)


_sql_validator = None


def get_sql_validator() -> SQLValidator:
    global _sql_validator
    if _sql_validator is None:
        _sql_validator = SQLValidator()
    return _sql_validator


def is_safe_sql(sql: str, dialect: Optional[Dialect] = None) -> bool:
    """Función de conveniencia"""
    is_safe, _ = get_sql_validator().validate(sql, dialect)
    return is_safe
