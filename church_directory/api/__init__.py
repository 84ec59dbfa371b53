"""API routes."""

from church_directory.api.auth import router as auth_router
from church_directory.api.settings import router as settings_router

__all__ = ["auth_router", "settings_router"]
