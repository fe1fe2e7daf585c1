# Store sobre Redis con serialización JSON

import json
import logging
from typing import Any, Optional

import redis

from insightpilot.core.domain.errors import StoreError
from insightpilot.core.ports.store_port import StorePort

logger = logging.getLogger(__name__)


class RedisStore(StorePort):
    """Persistencia de configuración en Redis (sin TTL)"""

    def __init__(self, url: str, prefix: str = "insightpilot", client=None):
        self.url = url
        self.prefix = prefix
        self.client = client or self._connect()

    def _connect(self):
        try:
            client = redis.from_url(self.url, decode_responses=True)
            client.ping()
            logger.info("Redis conectado")
            return client
        except redis.RedisError as e:
            raise StoreError(f"Redis no disponible: {e}", backend="redis") from e

    def _key(self, key: str) -> str:
        return f"{self.prefix}:{key}"

    def get(self, key: str) -> Optional[Any]:
        try:
            data = self.client.get(self._key(key))
        except redis.RedisError as e:
            logger.error(f"Redis get error: {e}")
            raise StoreError(str(e), backend="redis") from e
        return json.loads(data) if data else None

    def set(self, key: str, value: Any) -> None:
        try:
            self.client.set(self._key(key), json.dumps(value))
        except redis.RedisError as e:
            logger.error(f"Redis set error: {e}")
            raise StoreError(str(e), backend="redis") from e

    def delete(self, key: str) -> None:
        try:
            self.client.delete(self._key(key))
        except redis.RedisError as e:
            logger.error(f"Redis delete error: {e}")
            raise StoreError(str(e), backend="redis") from e

    def is_connected(self) -> bool:
        try:
            self.client.ping()
            return True
        except redis.RedisError:
            return False
