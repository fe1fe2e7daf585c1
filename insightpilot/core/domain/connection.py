# Entidades de conexión

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict
from uuid import uuid4

from insightpilot.core.domain.errors import ValidationError


class BackendKind(str, Enum):
    """Tipo de base de datos (también define el dialecto SQL)"""

    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    SQLSERVER = "sqlserver"


# El dialecto es el tipo de backend
Dialect = BackendKind


class ConnectionStatus(str, Enum):
    DISCONNECTED = "disconnected"
    TESTING = "testing"
    CONNECTED = "connected"


DEFAULT_PORTS = {
    BackendKind.POSTGRESQL: 5432,
    BackendKind.MYSQL: 3306,
    BackendKind.SQLSERVER: 1433,
}

# Campos que afectan a la conectividad: editarlos invalida el estado
CONNECTION_FIELDS = ("kind", "host", "port", "database", "username", "secret")
EDITABLE_FIELDS = ("name",) + CONNECTION_FIELDS + ("status",)


def new_profile_id() -> str:
    return str(uuid4())


def parse_kind(value: Any) -> BackendKind:
    try:
        return BackendKind(value)
    except ValueError:
        supported = ", ".join(k.value for k in BackendKind)
        raise ValidationError(
            f"Tipo de base de datos no soportado: '{value}'. Soportados: {supported}",
            field="kind",
        )


def validate_fields(host: Any, port: Any, database: Any, username: Any, secret: Any):
    """Valida los campos estáticos de un perfil. Lanza ValidationError."""
    for name, value in (
        ("host", host),
        ("database", database),
        ("username", username),
        ("secret", secret),
    ):
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(f"El campo '{name}' es obligatorio.", field=name)

    if isinstance(port, bool) or not isinstance(port, int) or not 1 <= port <= 65535:
        raise ValidationError("El puerto debe estar entre 1 y 65535.", field="port")


@dataclass
class ConnectionProfile:
    """Definición guardada de una conexión a base de datos"""

    name: str
    kind: BackendKind
    host: str
    port: int
    database: str
    username: str
    secret: str = field(repr=False)
    id: str = field(default_factory=new_profile_id)
    status: ConnectionStatus = ConnectionStatus.DISCONNECTED
    revision: int = 0

    def validate(self):
        parse_kind(self.kind)
        validate_fields(self.host, self.port, self.database, self.username, self.secret)

    @property
    def is_connected(self) -> bool:
        return self.status == ConnectionStatus.CONNECTED

    def to_dict(self, include_secret: bool = True) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "name": self.name,
            "kind": self.kind.value,
            "host": self.host,
            "port": self.port,
            "database": self.database,
            "username": self.username,
            "status": self.status.value,
            "revision": self.revision,
        }
        if include_secret:
            data["secret"] = self.secret
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConnectionProfile":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            kind=BackendKind(data["kind"]),
            host=data["host"],
            port=int(data["port"]),
            database=data["database"],
            username=data["username"],
            secret=data.get("secret", ""),
            status=ConnectionStatus(data.get("status", "disconnected")),
            revision=int(data.get("revision", 0)),
        )

    def describe(self) -> str:
        """Descripción segura para logs (sin credenciales)"""
        return f"{self.name or self.id} ({self.kind.value}://{self.host}:{self.port}/{self.database})"
