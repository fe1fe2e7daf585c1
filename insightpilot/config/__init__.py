from insightpilot.config.settings import settings

__all__ = ["settings"]
