"""API routes."""

from discipline_engine.api.routes.corrective_actions import router as corrective_actions_router
from discipline_engine.api.routes.employees import router as employees_router
from discipline_engine.api.routes.health import router as health_router
from discipline_engine.api.routes.signing import router as signing_router
from discipline_engine.api.routes.violation_categories import (
    router as violation_categories_router,
)

__all__ = [
    "corrective_actions_router",
    "employees_router",
    "health_router",
    "signing_router",
    "violation_categories_router",
]
