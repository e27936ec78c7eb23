"""Scrape and cache management endpoints."""

import datetime
import time
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..core.logging import get_logger
from ..models.scrape import ResultBundle, ScrapeRequest
from ..services.orchestrator import ScrapeOrchestrator
from .dependencies import get_orchestrator

logger = get_logger(__name__)
router = APIRouter(tags=["scraper"])


def _elapsed(started: float) -> float:
    return round(time.perf_counter() - started, 3)


def _bundle_payload(bundle: ResultBundle) -> Dict[str, Any]:
    if bundle.error is not None:
        return {
            "status": "error",
            "url": bundle.url,
            "error": bundle.error,
            "timestamp": bundle.timestamp.isoformat(),
            "data": bundle.data,
            "meta": {
                "executionTime": round(bundle.execution_time, 3),
                "success": False,
            },
        }

    return {
        "status": "success",
        "url": bundle.url,
        "title": bundle.title,
        "timestamp": bundle.timestamp.isoformat(),
        "data": bundle.data,
        "meta": {
            "executionTime": round(bundle.execution_time, 3),
            "fromCache": bundle.from_cache,
        },
    }


async def _run_scrape(body: ScrapeRequest, orchestrator: ScrapeOrchestrator) -> ResultBundle:
    target = str(body.url)
    try:
        return await orchestrator.scrape_safe(target, body.selectors, body.options)
    except Exception as e:
        logger.exception("Unexpected error while scraping", url=target, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error while scraping")


@router.post("/scrape")
async def scrape(
    body: ScrapeRequest,
    orchestrator: ScrapeOrchestrator = Depends(get_orchestrator),
) -> Dict[str, Any]:
    """Scrape one URL with the given selectors.

    A scrape that fails after every retry still answers 200; the payload
    carries ``status: "error"`` and the error message.
    """
    started = time.perf_counter()
    bundle = await _run_scrape(body, orchestrator)

    payload = _bundle_payload(bundle)
    payload["meta"]["apiResponseTime"] = _elapsed(started)
    return payload


@router.post("/crawl")
async def crawl(
    body: ScrapeRequest,
    orchestrator: ScrapeOrchestrator = Depends(get_orchestrator),
) -> Dict[str, Any]:
    """Backward compatible variant of /scrape returning a result list."""
    started = time.perf_counter()
    bundle = await _run_scrape(body, orchestrator)

    return {
        "status": "success" if bundle.error is None else "error",
        "results": [_bundle_payload(bundle)],
        "meta": {
            "urlsProcessed": 1,
            "executionTime": round(bundle.execution_time, 3),
            "apiResponseTime": _elapsed(started),
            "timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat(),
        },
    }


@router.delete("/cache")
async def clear_cache(
    url: Optional[str] = Query(None, description="Only clear entries whose URL starts with this"),
    orchestrator: ScrapeOrchestrator = Depends(get_orchestrator),
) -> Dict[str, Any]:
    """Clear the whole result cache, or entries for a URL prefix."""
    keys_deleted = orchestrator.clear_cache(url)
    message = f"Cache cleared for URL: {url}" if url else "Cache cleared"
    return {"status": "success", "message": message, "keysDeleted": keys_deleted}


@router.delete("/cache/{target:path}")
async def clear_cache_for_target(
    target: str,
    orchestrator: ScrapeOrchestrator = Depends(get_orchestrator),
) -> Dict[str, Any]:
    """Clear cache entries whose URL starts with ``target``."""
    keys_deleted = orchestrator.clear_cache(target)
    return {
        "status": "success",
        "message": f"Cache cleared for URL: {target}",
        "keysDeleted": keys_deleted,
    }
