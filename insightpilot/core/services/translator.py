# Traductores lenguaje natural -> SQL

import re
import logging
import unicodedata
from typing import List, Optional

from langchain_core.messages import HumanMessage, SystemMessage

from insightpilot.config.settings import settings
from insightpilot.core.domain.connection import Dialect
from insightpilot.core.domain.query import TranslationResult
from insightpilot.core.ports.llm_port import LLMPort
from insightpilot.core.ports.translator_port import TranslatorPort
from insightpilot.core.services.security import get_sql_validator

logger = logging.getLogger(__name__)

# Marcadores en orden de prioridad: el más específico gana al genérico
LIST_MARKERS = ("todos", "todas", "listar", "lista", "all", "list")
COUNT_MARKERS = ("contar", "cuántos", "cuántas", "cuantos", "cuantas", "count", "how many")
RECENT_MARKERS = (
    "últimos",
    "últimas",
    "ultimos",
    "ultimas",
    "recientes",
    "recent",
    "latest",
)

PLAIN_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def normalize(text: str) -> str:
    return unicodedata.normalize("NFC", text or "").lower().strip()


def tokenize(text: str) -> List[str]:
    return re.findall(r"\w+", text)


def quote_identifier(name: str, dialect: Dialect) -> str:
    """
    Cita un identificador (por partes separadas por punto) solo si hace falta.
    Las partes vacías se descartan; sin partes retorna "".
    """
    parts = []
    for part in name.split("."):
        part = part.strip()
        if not part:
            continue
        if PLAIN_IDENTIFIER.match(part):
            parts.append(part)
        elif dialect == Dialect.MYSQL:
            parts.append("`" + part.replace("`", "``") + "`")
        elif dialect == Dialect.SQLSERVER:
            parts.append("[" + part.replace("]", "]]") + "]")
        else:
            parts.append('"' + part.replace('"', '""') + '"')
    return ".".join(parts)


def quote_literal(value: str, dialect: Dialect) -> str:
    escaped = value.replace("'", "''")
    if dialect == Dialect.MYSQL:
        escaped = escaped.replace("\\", "\\\\")
    return f"'{escaped}'"


def select_all(table: str, dialect: Dialect, limit: Optional[int] = None, tail: str = "") -> str:
    """SELECT * con el límite en la sintaxis del dialecto"""
    tail = f" {tail}" if tail else ""
    if limit is None:
        return f"SELECT * FROM {table}{tail};"
    if dialect == Dialect.SQLSERVER:
        return f"SELECT TOP {limit} * FROM {table}{tail};"
    return f"SELECT * FROM {table}{tail} LIMIT {limit};"


class RuleBasedTranslator(TranslatorPort):
    """
    Traductor por palabras clave. Función pura de (pregunta, tabla, dialecto).

    Cascada:
    1. todos/listar -> SELECT * ... LIMIT 10
    2. contar/cuántos -> SELECT COUNT(*) AS total
    3. últimos/recientes -> ORDER BY created_at DESC LIMIT 5
    4. resto -> WHERE name LIKE '%<primera palabra>%'
    """

    def __init__(self, default_table: str = None):
        self.default_table = default_table or settings.query.default_table

    def translate(
        self, utterance: str, table_hint: Optional[str], dialect: Dialect
    ) -> TranslationResult:
        dialect = Dialect(dialect)
        text = normalize(utterance)
        tokens = tokenize(text)
        table = quote_identifier(table_hint or "", dialect) or quote_identifier(
            self.default_table, dialect
        )

        if self._matches(tokens, LIST_MARKERS):
            query = select_all(table, dialect, limit=10)
        elif self._matches(tokens, COUNT_MARKERS):
            query = f"SELECT COUNT(*) AS total FROM {table};"
        elif self._matches(tokens, RECENT_MARKERS):
            order = f"ORDER BY {quote_identifier('created_at', dialect)} DESC"
            query = select_all(table, dialect, limit=5, tail=order)
        else:
            first = tokens[0] if tokens else ""
            where = (
                f"WHERE {quote_identifier('name', dialect)} LIKE "
                f"{quote_literal('%' + first + '%', dialect)}"
            )
            query = select_all(table, dialect, tail=where)

        return TranslationResult(query=query, dialect=dialect, strategy="rules")

    @staticmethod
    def _matches(tokens: List[str], markers) -> bool:
        joined = f" {' '.join(tokens)} "
        for marker in markers:
            if " " in marker:
                if f" {marker} " in joined:
                    return True
            elif marker in tokens:
                return True
        return False


SQL_SYSTEM = """Eres un generador de SQL. Tu respuesta debe ser ÚNICAMENTE código SQL.

CRÍTICO - FORMATO DE RESPUESTA:
- SOLO código SQL, NADA más
- SIN texto explicativo
- SIN markdown (no uses ```)
- La respuesta debe EMPEZAR con SELECT

REGLAS SQL:
1. SOLO SELECT (nunca INSERT, UPDATE, DELETE)
2. Usa la sintaxis del dialecto indicado ({dialect})
3. Limita los resultados a máximo 100 filas ({limit_hint})"""

SQL_USER = """DIALECTO: {dialect}
TABLA: {table}
PREGUNTA: {query}

Responde SOLO con el SELECT:"""

LIMIT_HINTS = {
    Dialect.POSTGRESQL: "LIMIT n",
    Dialect.MYSQL: "LIMIT n",
    Dialect.SQLSERVER: "SELECT TOP n",
}


class LLMTranslator(TranslatorPort):
    """
    Traductor respaldado por un LLM. Si el modelo falla o produce SQL no
    seguro, delega en el traductor por reglas.
    """

    def __init__(self, llm: LLMPort, fallback: Optional[TranslatorPort] = None):
        self.llm = llm
        self.fallback = fallback or RuleBasedTranslator()

    def translate(
        self, utterance: str, table_hint: Optional[str], dialect: Dialect
    ) -> TranslationResult:
        dialect = Dialect(dialect)
        table = quote_identifier(table_hint or "", dialect) or quote_identifier(
            settings.query.default_table, dialect
        )
        try:
            response = self.llm.invoke(
                [
                    SystemMessage(
                        content=SQL_SYSTEM.format(
                            dialect=dialect.value, limit_hint=LIMIT_HINTS[dialect]
                        )
                    ),
                    HumanMessage(
                        content=SQL_USER.format(
                            dialect=dialect.value, table=table, query=utterance
                        )
                    ),
                ]
            )
            sql = self._clean(response.content)
        except Exception as e:
            logger.warning(f"LLM falló, usando reglas: {str(e)[:80]}")
            return self.fallback.translate(utterance, table_hint, dialect)

        is_safe, reason = get_sql_validator().validate(sql, dialect)
        if not is_safe:
            logger.warning(f"SQL del LLM rechazado ({reason}), usando reglas")
            return self.fallback.translate(utterance, table_hint, dialect)

        return TranslationResult(query=sql, dialect=dialect, strategy="llm")

    def _clean(self, raw: str) -> str:
        sql = (raw or "").strip()

        # Extraer SQL de markdown ```sql ... ```
        if "```" in sql:
            lines = []
            in_block = False
            for line in sql.split("\n"):
                if line.strip().startswith("```"):
                    in_block = not in_block
                elif in_block:
                    lines.append(line)
            if lines:
                sql = " ".join(lines).strip()

        match = re.search(r"\bSELECT\b", sql, re.IGNORECASE)
        if not match:
            logger.warning(f"No se encontró SELECT en: {sql[:100]}...")
            return ""
        sql = sql[match.start():]

        sql = re.sub(r"\s+", " ", sql).strip().rstrip(";").strip()
        return sql + ";"

