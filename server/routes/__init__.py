"""API routes package."""

from server.routes.api_routes import router as api_router
from server.routes.file_routes import content_router
from server.routes.file_routes import router as file_router

__all__ = ["api_router", "content_router", "file_router"]
