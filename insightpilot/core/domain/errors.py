# Excepciones personalizadas para InsightPilot


class InsightPilotError(Exception):
    """Excepción base para InsightPilot"""

    def __init__(self, message: str, code: str, details: dict = None):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message, "details": self.details}


class ValidationError(InsightPilotError):
    """Campos de perfil o parámetros inválidos (nunca intenta I/O)"""

    def __init__(self, message: str, field: str = None):
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            details={"field": field} if field else {},
        )
        self.field = field


class NotFoundError(InsightPilotError):
    """Recurso desconocido (perfil, sesión o turno)"""

    def __init__(self, resource_id: str, resource: str = "connection"):
        super().__init__(
            message=f"{resource} '{resource_id}' no encontrado.",
            code="NOT_FOUND",
            details={"id": resource_id, "resource": resource},
        )
        self.resource_id = resource_id


class AlreadyInProgressError(InsightPilotError):
    """Ya hay una prueba de conexión en curso para el perfil"""

    def __init__(self, profile_id: str):
        super().__init__(
            message=f"La conexión '{profile_id}' ya se está probando.",
            code="ALREADY_IN_PROGRESS",
            details={"id": profile_id},
        )


class SessionBusyError(InsightPilotError):
    """La sesión está procesando otra consulta"""

    def __init__(self, session_id: str):
        super().__init__(
            message=f"La sesión '{session_id}' está procesando otra consulta. Intenta de nuevo.",
            code="SESSION_BUSY",
            details={"session_id": session_id},
        )


class NoActiveConnectionError(InsightPilotError):
    """No hay una conexión utilizable seleccionada"""

    def __init__(self, connection_id: str = None, reason: str = "missing"):
        super().__init__(
            message="Selecciona una conexión de base de datos activa para comenzar.",
            code="NO_ACTIVE_CONNECTION",
            details={"connection_id": connection_id, "reason": reason},
        )


class BackendExecutionError(InsightPilotError):
    """Fallo del driver al ejecutar (auth, timeout, query rechazada)"""

    def __init__(self, message: str, query: str = None, reason: str = "driver"):
        super().__init__(
            message=message,
            code="BACKEND_EXECUTION_ERROR",
            details={"query": query[:100] if query else None, "reason": reason},
        )
        self.query = query
        self.reason = reason


class NothingToExportError(InsightPilotError):
    """No hay filas que exportar"""

    def __init__(self, message: str = "No hay resultados para exportar."):
        super().__init__(message=message, code="NOTHING_TO_EXPORT")


class StoreError(InsightPilotError):
    """Errores del almacenamiento de configuración"""

    def __init__(self, message: str, backend: str = None):
        super().__init__(
            message=message, code="STORE_ERROR", details={"backend": backend}
        )
