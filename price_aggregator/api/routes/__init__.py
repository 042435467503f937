from .health import get_health, health_router
from .prices import prices_router

__all__ = ["get_health", "health_router", "prices_router"]
