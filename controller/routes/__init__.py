"""API routes package."""

from controller.routes.auth_routes import router as auth_router
from controller.routes.file_routes import router as file_router
from controller.routes.user_routes import router as user_router

__all__ = ["auth_router", "file_router", "user_router"]
