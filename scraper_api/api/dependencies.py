"""FastAPI dependency accessors."""

from fastapi import Request

from ..services.orchestrator import ScrapeOrchestrator


async def get_orchestrator(request: Request) -> ScrapeOrchestrator:
    """Orchestrator created by the application lifespan."""
    return request.app.state.orchestrator
