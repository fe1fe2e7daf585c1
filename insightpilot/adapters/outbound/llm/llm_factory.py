# Fábrica de LLM - OpenAI vía LangChain

import logging
from functools import lru_cache
from typing import List, Any, Optional

from insightpilot.config.settings import settings
from insightpilot.core.ports.llm_port import LLMPort
from insightpilot.utils.logging import token_counter

logger = logging.getLogger(__name__)


class LLMWrapper(LLMPort):
    """Wrapper de LLM con conteo de tokens - Implementa LLMPort"""

    def __init__(self, llm, provider: str, model: str):
        self.llm = llm
        self.provider = provider
        self.model = model

    def invoke(self, messages: List[Any]) -> Any:
        """Invocación síncrona"""
        input_text = " ".join(m.content for m in messages if hasattr(m, "content"))
        response = self.llm.invoke(messages)
        output_text = (
            response.content if hasattr(response, "content") else str(response)
        )
        token_counter.track(input_text, output_text, self.model)
        return response

    def get_model_name(self) -> str:
        """Retorna nombre del modelo"""
        return f"{self.provider}/{self.model}"


@lru_cache(maxsize=4)
def get_llm(api_key: str, model: Optional[str] = None) -> LLMWrapper:
    """Retorna el LLM de OpenAI para la API key dada"""
    if not api_key:
        raise ValueError("Se requiere una API key de OpenAI")

    from langchain_openai import ChatOpenAI

    model = model or settings.ai.openai_model
    llm = ChatOpenAI(
        model=model,
        temperature=settings.ai.temperature,
        api_key=api_key,
        max_tokens=settings.ai.max_tokens_response,
    )
    logger.info(f"LLM: OpenAI ({model})")
    return LLMWrapper(llm, "openai", model)
