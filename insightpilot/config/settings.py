"""Configuración del proyecto."""

from pathlib import Path
from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent.parent
load_dotenv(BASE_DIR / ".env")


class StoreSettings(BaseSettings):
    """STORE_BACKEND, STORE_PATH, STORE_REDIS_URL, STORE_PREFIX"""

    model_config = SettingsConfigDict(env_prefix="STORE_")

    # file | redis | memory
    backend: str = "file"
    path: str = str(BASE_DIR / "data" / "insightpilot.json")
    redis_url: str = "redis://localhost:6379/0"
    prefix: str = "insightpilot"


class ProbeSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="PROBE_")

    timeout: float = 10.0


class QuerySettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="QUERY_")

    timeout: float = 30.0
    default_table: str = "users"


class SessionSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="SESSION_")

    # Sesiones en memoria: límite, expiración por inactividad y ventana de turnos
    max_sessions: int = 100
    idle_ttl: float = 3600.0
    max_turns: int = 50


class AISettings(BaseSettings):
    # Respaldo cuando el store no tiene una API key guardada
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    temperature: float = 0.0
    max_tokens_response: int = 500


class LogSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = "INFO"


class Settings(BaseSettings):
    """Configuración global del proyecto"""

    app_name: str = "InsightPilot"
    debug: bool = False
    store: StoreSettings = StoreSettings()
    probe: ProbeSettings = ProbeSettings()
    query: QuerySettings = QuerySettings()
    sessions: SessionSettings = SessionSettings()
    ai: AISettings = AISettings()
    logs: LogSettings = LogSettings()


settings = Settings()
