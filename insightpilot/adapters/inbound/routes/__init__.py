# Paquete de rutas - Módulos APIRouter

from insightpilot.adapters.inbound.routes.health import router as health_router
from insightpilot.adapters.inbound.routes.connections import router as connections_router
from insightpilot.adapters.inbound.routes.sessions import router as sessions_router
from insightpilot.adapters.inbound.routes.settings import router as settings_router

__all__ = ["health_router", "connections_router", "sessions_router", "settings_router"]
