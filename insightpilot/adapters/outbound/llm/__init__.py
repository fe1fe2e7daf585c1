from insightpilot.adapters.outbound.llm.llm_factory import LLMWrapper, get_llm

__all__ = ["LLMWrapper", "get_llm"]
