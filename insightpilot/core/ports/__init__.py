# Puertos del núcleo - Interfaces para dependencias externas

from insightpilot.core.ports.database_port import DatabasePort
from insightpilot.core.ports.store_port import StorePort
from insightpilot.core.ports.translator_port import TranslatorPort
from insightpilot.core.ports.llm_port import LLMPort

__all__ = ["DatabasePort", "StorePort", "TranslatorPort", "LLMPort"]
