"""API router package for endpoint composition."""

from .apps import api_create_apps_router
from .status import api_create_status_router

__all__ = ["api_create_apps_router", "api_create_status_router"]
