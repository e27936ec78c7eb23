"""API routes for the scraper service."""

from .health import router as health_router
from .scraper import router as scraper_router

__all__ = ["health_router", "scraper_router"]
