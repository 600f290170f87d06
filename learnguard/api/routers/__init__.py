"""API routers package."""

from learnguard.api.routers.alerts import router as alerts_router
from learnguard.api.routers.health import router as health_router
from learnguard.api.routers.interventions import router as interventions_router
from learnguard.api.routers.users import router as users_router

__all__ = [
    "alerts_router",
    "health_router",
    "interventions_router",
    "users_router",
]
