# Registro de conexiones: perfiles persistidos en un store clave-valor

import logging
import threading
from dataclasses import replace
from typing import Any, Dict, List, Optional

from insightpilot.core.domain.connection import (
    CONNECTION_FIELDS,
    DEFAULT_PORTS,
    EDITABLE_FIELDS,
    ConnectionProfile,
    ConnectionStatus,
    new_profile_id,
    parse_kind,
)
from insightpilot.core.domain.errors import (
    AlreadyInProgressError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from insightpilot.core.ports.store_port import StorePort
from insightpilot.utils.logging import secret_filter

logger = logging.getLogger(__name__)

CONNECTIONS_KEY = "connections"
API_KEY_KEY = "openai_api_key"


class ConnectionRegistry:
    """
    Dueño de todos los perfiles de conexión.

    - Cada mutación persiste el snapshot completo antes de retornar; si el
      store falla, el estado en memoria no cambia y el StoreError se propaga.
      Excepción: salir de 'testing' se aplica en memoria aunque el store falle.
    - Las mutaciones se serializan con un lock (ediciones vs. resultados de probe).
    - Solo entrega copias: nadie fuera del registro muta un perfil.
    """

    def __init__(self, store: StorePort):
        self.store = store
        self._lock = threading.RLock()
        self._profiles: Dict[str, ConnectionProfile] = {}
        self._load()

    def _load(self):
        data = self.store.get(CONNECTIONS_KEY) or []
        profiles = {}
        for item in data:
            profile = ConnectionProfile.from_dict(item)
            # 'testing' es transitorio: un probe interrumpido no sobrevive al reinicio
            if profile.status == ConnectionStatus.TESTING:
                profile.status = ConnectionStatus.DISCONNECTED
            secret_filter.register(profile.secret)
            profiles[profile.id] = profile
        self._profiles = profiles
        secret_filter.register(self.openai_api_key)
        logger.info(f"Registro cargado: {len(profiles)} conexiones")

    def _commit(self, profiles: Dict[str, ConnectionProfile]):
        """Persiste y luego reemplaza el estado en memoria"""
        self.store.set(CONNECTIONS_KEY, [p.to_dict() for p in profiles.values()])
        self._profiles = profiles

    def _require(self, profile_id: str) -> ConnectionProfile:
        profile = self._profiles.get(profile_id)
        if profile is None:
            raise NotFoundError(profile_id)
        return profile

    # Operaciones públicas

    def add(
        self,
        name: str,
        kind: Any,
        host: str,
        database: str,
        username: str,
        secret: str,
        port: Optional[int] = None,
    ) -> ConnectionProfile:
        """Crea un perfil nuevo en estado 'disconnected'"""
        kind = parse_kind(kind)
        profile = ConnectionProfile(
            name=name or "",
            kind=kind,
            host=host,
            port=DEFAULT_PORTS[kind] if port is None else port,
            database=database,
            username=username,
            secret=secret,
        )
        profile.validate()
        secret_filter.register(profile.secret)

        with self._lock:
            while profile.id in self._profiles:
                profile = replace(profile, id=new_profile_id())
            profiles = dict(self._profiles)
            profiles[profile.id] = profile
            self._commit(profiles)

        logger.info(f"Conexión agregada: {profile.id} {profile.describe()}")
        return replace(profile)

    def update(self, profile_id: str, **fields) -> ConnectionProfile:
        """Combina campos editables sobre un perfil existente"""
        unknown = set(fields) - set(EDITABLE_FIELDS)
        if unknown:
            name = sorted(unknown)[0]
            raise ValidationError(f"El campo '{name}' no es editable.", field=name)

        if "secret" in fields:
            secret_filter.register(fields["secret"])
        if "kind" in fields:
            fields["kind"] = parse_kind(fields["kind"])
        if "status" in fields:
            try:
                fields["status"] = ConnectionStatus(fields["status"])
            except ValueError:
                raise ValidationError(f"Estado inválido: '{fields['status']}'", field="status")
            if fields["status"] == ConnectionStatus.TESTING:
                raise ValidationError(
                    "El estado 'testing' solo lo asigna una prueba de conexión.",
                    field="status",
                )

        with self._lock:
            current = self._require(profile_id)
            updated = replace(current, **fields)
            updated.validate()

            changed = any(
                getattr(updated, f) != getattr(current, f) for f in CONNECTION_FIELDS
            )
            if changed:
                updated.revision = current.revision + 1
                if "status" not in fields:
                    updated.status = ConnectionStatus.DISCONNECTED

            profiles = dict(self._profiles)
            profiles[profile_id] = updated
            self._commit(profiles)

        logger.info(f"Conexión actualizada: {profile_id} ({', '.join(sorted(fields))})")
        return replace(updated)

    def delete(self, profile_id: str) -> None:
        """Elimina un perfil; un id desconocido no es error"""
        with self._lock:
            if profile_id not in self._profiles:
                return
            profiles = dict(self._profiles)
            del profiles[profile_id]
            self._commit(profiles)
        logger.info(f"Conexión eliminada: {profile_id}")

    def get(self, profile_id: str) -> ConnectionProfile:
        with self._lock:
            return replace(self._require(profile_id))

    def list(self) -> List[ConnectionProfile]:
        with self._lock:
            return [replace(p) for p in self._profiles.values()]

    def __len__(self) -> int:
        return len(self._profiles)

    # Transiciones de estado usadas por ConnectionProbe

    def begin_probe(self, profile_id: str) -> ConnectionProfile:
        """Pasa el perfil a 'testing' de forma atómica"""
        with self._lock:
            current = self._require(profile_id)
            if current.status == ConnectionStatus.TESTING:
                raise AlreadyInProgressError(profile_id)
            updated = replace(current, status=ConnectionStatus.TESTING)
            profiles = dict(self._profiles)
            profiles[profile_id] = updated
            self._commit(profiles)
            return replace(updated)

    def set_status(
        self,
        profile_id: str,
        status: ConnectionStatus,
        expected_revision: Optional[int] = None,
    ) -> bool:
        """
        Asigna el estado. Retorna False si el perfil ya no existe o fue editado
        (revision distinta) mientras se probaba.
        """
        status = ConnectionStatus(status)
        with self._lock:
            current = self._profiles.get(profile_id)
            if current is None:
                logger.debug(f"set_status ignorado, perfil eliminado: {profile_id}")
                return False
            if expected_revision is not None and current.revision != expected_revision:
                logger.info(f"Resultado de prueba descartado, perfil editado: {profile_id}")
                return False
            if current.status == status:
                return True
            profiles = dict(self._profiles)
            profiles[profile_id] = replace(current, status=status)
            try:
                self._commit(profiles)
            except StoreError:
                if current.status != ConnectionStatus.TESTING:
                    raise
                # Salir de 'testing' nunca depende del store
                self._profiles = profiles
                logger.error(f"No se pudo persistir el estado de {profile_id}: {status.value}")
                raise
        logger.debug(f"Estado {profile_id}: {status.value}")
        return True

    # API key del traductor

    @property
    def openai_api_key(self) -> str:
        return self.store.get(API_KEY_KEY) or ""

    def set_openai_api_key(self, key: str) -> None:
        key = (key or "").strip()
        if key:
            secret_filter.register(key)
            self.store.set(API_KEY_KEY, key)
        else:
            self.store.delete(API_KEY_KEY)
        logger.info("API key del traductor " + ("actualizada" if key else "eliminada"))
