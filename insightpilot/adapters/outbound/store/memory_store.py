# Store en memoria (tests y modo efímero)

import json
import threading
from typing import Any, Dict, Optional

from insightpilot.core.ports.store_port import StorePort


class MemoryStore(StorePort):
    """Guarda copias JSON de cada valor para detectar datos no serializables"""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._lock = threading.Lock()
        self._data: Dict[str, str] = {
            k: json.dumps(v) for k, v in (initial or {}).items()
        }

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            raw = self._data.get(key)
        return json.loads(raw) if raw is not None else None

    def set(self, key: str, value: Any) -> None:
        raw = json.dumps(value)
        with self._lock:
            self._data[key] = raw

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def is_connected(self) -> bool:
        return True
