# Core Services - Lógica de negocio

from insightpilot.core.services.registry import ConnectionRegistry
from insightpilot.core.services.probe import ConnectionProbe
from insightpilot.core.services.catalog import TableCatalog
from insightpilot.core.services.translator import LLMTranslator, RuleBasedTranslator
from insightpilot.core.services.query_session import QuerySession
from insightpilot.core.services.session_manager import SessionManager
from insightpilot.core.services.export import to_delimited_text
from insightpilot.core.services.security import SQLValidator, get_sql_validator, is_safe_sql

__all__ = [
    "ConnectionRegistry",
    "ConnectionProbe",
    "TableCatalog",
    "RuleBasedTranslator",
    "LLMTranslator",
    "QuerySession",
    "SessionManager",
    "to_delimited_text",
    "SQLValidator",
    "get_sql_validator",
    "is_safe_sql",
]
