"""API routes."""

from validly.api.routes.health import router as health_router
from validly.api.routes.validate import router as validate_router

__all__ = ["health_router", "validate_router"]
