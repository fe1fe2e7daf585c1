# Puerto de almacenamiento clave-valor
# Guarda la configuración: "connections" y "openai_api_key"

from abc import ABC, abstractmethod
from typing import Optional, Any


class StorePort(ABC):
    """Puerto para persistir configuración (valores serializables a JSON)"""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Obtiene un valor, None si no existe"""
        pass

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Guarda un valor de forma síncrona. Lanza StoreError si falla"""
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Elimina un valor"""
        pass

    @abstractmethod
    def is_connected(self) -> bool:
        """Verifica disponibilidad"""
        pass
