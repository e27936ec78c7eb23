"""Scraping services."""

from typing import Optional

from ..core.config import Settings, get_settings
from ..core.policy import ScrapePolicy, get_policy
from .field_extractor import FieldExtractor
from .interceptor import ResourceInterceptor
from .orchestrator import ScrapeOrchestrator
from .result_cache import ResultCache
from .retry import retry_async
from .session_manager import SessionManager


def create_orchestrator(
    settings: Optional[Settings] = None,
    policy: Optional[ScrapePolicy] = None,
) -> ScrapeOrchestrator:
    """Wire a session, cache and policy into an orchestrator."""
    settings = settings or get_settings()
    policy = policy or get_policy(settings.policy_file)

    return ScrapeOrchestrator(
        session=SessionManager(launch_args=policy.launch.args, settings=settings),
        cache=ResultCache(ttl_seconds=settings.cache_ttl_seconds),
        block_policy=policy.blocking,
        settings=settings,
    )


__all__ = [
    "FieldExtractor",
    "ResourceInterceptor",
    "ResultCache",
    "ScrapeOrchestrator",
    "SessionManager",
    "create_orchestrator",
    "retry_async",
]
