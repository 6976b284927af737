"""API routers."""
from app.routers.health_router import router as health_router
from app.routers.dashboard_router import router as dashboard_router

__all__ = [
    "health_router",
    "dashboard_router",
]
