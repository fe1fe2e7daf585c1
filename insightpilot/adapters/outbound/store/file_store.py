# Store sobre un archivo JSON local

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Dict, Optional

from insightpilot.core.domain.errors import StoreError
from insightpilot.core.ports.store_port import StorePort

logger = logging.getLogger(__name__)


class JsonFileStore(StorePort):
    """
    Guarda todas las claves en un único archivo JSON.
    Cada escritura reemplaza el archivo de forma atómica (tmp + os.replace).
    """

    def __init__(self, path: str):
        self.path = Path(path)
        self._lock = threading.Lock()
        self._data: Dict[str, Any] = self._load()

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StoreError(f"No se pudo leer {self.path}: {e}", backend="file") from e
        if not isinstance(data, dict):
            raise StoreError(f"Formato inválido en {self.path}", backend="file")
        logger.debug(f"Store cargado: {self.path}")
        return data

    def _write(self, data: Dict[str, Any]):
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=self.path.parent, prefix=self.path.name, suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, ensure_ascii=False, indent=2)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            logger.error(f"Error escribiendo {self.path}: {e}")
            raise StoreError(f"No se pudo escribir {self.path}: {e}", backend="file") from e

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            value = self._data.get(key)
            return json.loads(json.dumps(value)) if value is not None else None

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            data = dict(self._data)
            data[key] = value
            self._write(data)
            self._data = data

    def delete(self, key: str) -> None:
        with self._lock:
            if key not in self._data:
                return
            data = dict(self._data)
            del data[key]
            self._write(data)
            self._data = data

    def is_connected(self) -> bool:
        return True
