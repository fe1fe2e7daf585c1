# Entidades de traducción

from dataclasses import dataclass
from typing import Optional

from insightpilot.core.domain.connection import Dialect


@dataclass(frozen=True)
class TranslationRequest:
    """Consulta en lenguaje natural"""

    utterance: str
    table_hint: Optional[str] = None
    dialect: Dialect = Dialect.POSTGRESQL


@dataclass(frozen=True)
class TranslationResult:
    """Query generada para un dialecto"""

    query: str
    dialect: Dialect
    strategy: str = "rules"  # 'rules' o 'llm'
