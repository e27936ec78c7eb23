"""Main FastAPI application for the scraper API."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .api.health import router as health_router
from .api.rate_limit import RateLimiter, enforce_rate_limit
from .api.scraper import router as scraper_router
from .core.config import get_settings
from .core.logging import get_logger, setup_logging
from .services import create_orchestrator
from .services.orchestrator import ScrapeOrchestrator

logger = get_logger(__name__)


def create_app(
    orchestrator: Optional[ScrapeOrchestrator] = None,
    rate_limiter: Optional[RateLimiter] = None,
) -> FastAPI:
    """Build the application; the arguments replace the default wiring."""
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging()
        app.state.orchestrator = orchestrator or create_orchestrator(settings)
        logger.info("Scraper API starting", prefix=settings.api_prefix)
        try:
            yield
        finally:
            await app.state.orchestrator.shutdown()
            logger.info("Scraper API stopped")

    app = FastAPI(
        title="Scraper API",
        description="Headless-browser scraping behind a REST interface",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.rate_limiter = rate_limiter or RateLimiter(
        max_requests=settings.rate_limit_max_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=settings.gzip_minimum_size)

    @app.exception_handler(Exception)
    async def unhandled_exception(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "Unhandled error",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content={"status": "error", "message": "Internal server error"},
        )

    # Include routers
    rate_limited = [Depends(enforce_rate_limit)]
    app.include_router(health_router, prefix=settings.api_prefix, dependencies=rate_limited)
    app.include_router(scraper_router, prefix=settings.api_prefix, dependencies=rate_limited)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()

    uvicorn.run(
        "scraper_api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
        log_level=settings.log_level.lower()
    )
