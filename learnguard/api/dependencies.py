"""FastAPI dependency injection for services.

Routes receive the process-wide ServiceRegistry (or one of its services)
through Depends(), so tests can swap the registry with
``app.dependency_overrides[get_registry]``.
"""

from typing import Annotated

from fastapi import Depends

from learnguard.modules.analytics.service import AnalyticsService
from learnguard.modules.intervention.service import PredictiveInterventionService
from learnguard.modules.pathing.service import LearningPathService
from learnguard.shared.service_registry import ServiceRegistry, get_service_registry


# ===================
# Registry
# ===================

def get_registry() -> ServiceRegistry:
    """Get the service registry for the current request."""
    return get_service_registry()


Registry = Annotated[ServiceRegistry, Depends(get_registry)]


# ===================
# Service Dependencies
# ===================

def get_intervention_service(registry: Registry) -> PredictiveInterventionService:
    return registry.intervention


def get_pathing_service(registry: Registry) -> LearningPathService:
    return registry.pathing


def get_analytics_service(registry: Registry) -> AnalyticsService:
    return registry.analytics


# Type aliases for service dependencies
InterventionServiceDep = Annotated[PredictiveInterventionService, Depends(get_intervention_service)]
PathingServiceDep = Annotated[LearningPathService, Depends(get_pathing_service)]
AnalyticsServiceDep = Annotated[AnalyticsService, Depends(get_analytics_service)]
