"""Route handlers for the keysync status surface."""
from keysync.server.routes.health import create_health_router
from keysync.server.routes.sync import create_sync_router
__all__ = [
    "create_health_router",
    "create_sync_router",
]
