import sys
import logging
import threading
from collections import defaultdict

import tiktoken
from insightpilot.config.settings import settings

REDACTED = "***"


class SecretFilter(logging.Filter):
    """Reemplaza credenciales conocidas en los mensajes (errores de driver incluidos)"""

    def __init__(self):
        super().__init__()
        self._secrets = set()
        self._lock = threading.Lock()

    def register(self, secret: str):
        # Valores muy cortos generarían reemplazos falsos
        if isinstance(secret, str) and len(secret) >= 4:
            with self._lock:
                self._secrets.add(secret)

    def redact(self, text: str) -> str:
        with self._lock:
            secrets = sorted(self._secrets, key=len, reverse=True)
        for secret in secrets:
            if secret in text:
                text = text.replace(secret, REDACTED)
        return text

    def filter(self, record: logging.LogRecord) -> bool:
        if not self._secrets:
            return True
        message = record.getMessage()
        redacted = self.redact(message)
        if redacted != message:
            record.msg = redacted
            record.args = ()
        return True


secret_filter = SecretFilter()


def setup_logging():
    """Configura el logger raíz: un handler a stdout con filtro de credenciales"""
    level = logging.DEBUG if settings.debug else settings.logs.level
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    formatter = logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        if settings.debug
        else "%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    handler.addFilter(secret_filter)

    secret_filter.register(settings.ai.openai_api_key)
    root_logger.handlers = [handler]

    for noisy in ["httpx", "httpcore", "openai", "urllib3", "asyncio"]:
        logging.getLogger(noisy).setLevel(logging.WARNING)


# Precio USD por millón de tokens
PRICES = {
    "gpt-4o-mini": {"input": 0.15, "output": 0.60},
    "gpt-4o": {"input": 2.50, "output": 10.0},
    "gpt-4.1-mini": {"input": 0.40, "output": 1.60},
}


class TokenCounter:
    """Consumo de tokens del traductor LLM, acumulado por modelo"""

    def __init__(self):
        try:
            self.encoder = tiktoken.get_encoding("cl100k_base")
        except Exception:
            self.encoder = None
        self.total_tokens = 0
        self.by_model = defaultdict(lambda: {"calls": 0, "input": 0, "output": 0, "cost": 0.0})
        self._lock = threading.Lock()

    def count(self, text: str) -> int:
        if not self.encoder:
            return len(text) // 4
        return len(self.encoder.encode(text))

    def track(self, input_text: str, output_text: str, model: str = "gpt-4o-mini") -> int:
        input_tokens = self.count(input_text)
        output_tokens = self.count(output_text)
        cost = self.estimate_cost(input_tokens, output_tokens, model)

        with self._lock:
            stats = self.by_model[model]
            stats["calls"] += 1
            stats["input"] += input_tokens
            stats["output"] += output_tokens
            stats["cost"] += cost
            self.total_tokens += input_tokens + output_tokens

        logging.debug(f"Tokens {model}: {input_tokens}->{output_tokens} (${cost:.6f})")
        return input_tokens + output_tokens

    @staticmethod
    def estimate_cost(input_t: int, output_t: int, model: str) -> float:
        p = PRICES.get(model, PRICES["gpt-4o-mini"])
        return (input_t * p["input"] + output_t * p["output"]) / 1_000_000

    def get_summary(self) -> dict:
        with self._lock:
            return {
                "total_tokens": self.total_tokens,
                "models": {
                    model: {**stats, "cost": round(stats["cost"], 6)}
                    for model, stats in self.by_model.items()
                },
            }


token_counter = TokenCounter()
