"""Health check and status endpoints."""

import datetime
import os
from typing import Dict, Any

import psutil
from fastapi import APIRouter, Depends

from .. import __version__
from ..services.orchestrator import ScrapeOrchestrator
from .dependencies import get_orchestrator

router = APIRouter(tags=["health"])

_MB = 1024 * 1024


@router.get("/health")
async def health_check() -> Dict[str, Any]:
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "scraper-api",
        "timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat(),
        "version": __version__,
    }


@router.get("/status")
async def system_status(
    orchestrator: ScrapeOrchestrator = Depends(get_orchestrator),
) -> Dict[str, Any]:
    """Process metrics, cache statistics and browser session state."""
    memory = psutil.Process(os.getpid()).memory_info()
    cache_stats = orchestrator.cache.stats()

    return {
        "status": "online",
        "version": __version__,
        "timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat(),
        "memory": {
            "rss": f"{round(memory.rss / _MB)} MB",
            "vms": f"{round(memory.vms / _MB)} MB",
        },
        "cache": {
            "keys": cache_stats["keys"],
            "stats": {
                "hits": cache_stats["hits"],
                "misses": cache_stats["misses"],
                "hitRate": round(cache_stats["hit_rate"], 3),
                "ttlSeconds": cache_stats["ttl_seconds"],
            },
        },
        "session": {
            "ready": orchestrator.session.is_ready,
            "launches": orchestrator.session.launch_count,
        },
        "pid": os.getpid(),
    }
