"""HTTP routers for the control API."""

from profile_scraper.routers.control import create_control_router
from profile_scraper.routers.health import create_health_router

__all__ = ["create_control_router", "create_health_router"]
