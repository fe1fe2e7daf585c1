# Puerto del traductor lenguaje natural -> SQL

from abc import ABC, abstractmethod
from typing import Optional

from insightpilot.core.domain.connection import Dialect
from insightpilot.core.domain.query import TranslationRequest, TranslationResult


class TranslatorPort(ABC):
    """Capacidad intercambiable: reglas, LLM, etc."""

    @abstractmethod
    def translate(
        self, utterance: str, table_hint: Optional[str], dialect: Dialect
    ) -> TranslationResult:
        """
        Traduce una pregunta a una query para el dialecto indicado.

        No debe lanzar excepciones: ante entradas raras retorna el patrón genérico.
        """
        pass

    def translate_request(self, request: TranslationRequest) -> TranslationResult:
        return self.translate(request.utterance, request.table_hint, request.dialect)
