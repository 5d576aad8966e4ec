"""API route modules."""

from routes.characters_routes import router as characters_router
from routes.health_routes import router as health_router
from routes.series_routes import router as series_router

__all__ = [
    "characters_router",
    "health_router",
    "series_router",
]
