"""API routers package."""

from .plugins import router as plugins_router
from .updates import router as updates_router

__all__ = ["plugins_router", "updates_router"]
