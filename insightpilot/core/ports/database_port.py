# Puerto de Base de Datos

from abc import ABC, abstractmethod
from typing import Any, Dict, List


class DatabasePort(ABC):
    """Puerto para acceso a base de datos (un adaptador por tipo de backend)"""

    @abstractmethod
    def connect(self) -> Any:
        """Abre una conexión y retorna el handle del driver"""
        pass

    @abstractmethod
    def execute(self, query: str) -> Dict[str, Any]:
        """Ejecuta una query y retorna columns + data, o error"""
        pass

    @abstractmethod
    def close(self, handle: Any) -> None:
        """Cierra el handle"""
        pass

    @abstractmethod
    def test_connection(self) -> bool:
        """Verifica la conexión"""
        pass

    @abstractmethod
    def list_tables(self) -> List[str]:
        """Tablas de usuario de la base (con esquema cuando aplica)"""
        pass
