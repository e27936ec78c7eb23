"""Per-client request quota for the API routes."""

import math
import time
from typing import Callable, Dict, NamedTuple, Tuple

from fastapi import HTTPException, Request, Response

from ..core.logging import get_logger

logger = get_logger(__name__)


class RateLimitState(NamedTuple):
    allowed: bool
    limit: int
    remaining: int
    reset_seconds: int


class RateLimiter:
    """Fixed-window request counter keyed by client address.

    Each client gets ``max_requests`` per ``window_seconds``; the window
    starts with the client's first request. ``max_requests=0`` disables
    the limit.
    """

    def __init__(
        self,
        max_requests: int = 100,
        window_seconds: int = 900,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: Dict[str, Tuple[float, int]] = {}

    @property
    def enabled(self) -> bool:
        return self.max_requests > 0

    def hit(self, client: str) -> RateLimitState:
        """Count one request from ``client``."""
        now = self._clock()
        started, count = self._windows.get(client, (now, 0))
        if now - started >= self.window_seconds:
            started, count = now, 0

        count += 1
        self._windows[client] = (started, count)
        self._purge(now)

        reset = max(0, math.ceil(started + self.window_seconds - now))
        return RateLimitState(
            allowed=count <= self.max_requests,
            limit=self.max_requests,
            remaining=max(0, self.max_requests - count),
            reset_seconds=reset,
        )

    def _purge(self, now: float) -> None:
        expired = [
            client for client, (started, _) in self._windows.items()
            if now - started >= self.window_seconds
        ]
        for client in expired:
            del self._windows[client]


async def enforce_rate_limit(request: Request, response: Response) -> None:
    """Dependency rejecting clients over their quota with 429."""
    limiter: RateLimiter = request.app.state.rate_limiter
    if not limiter.enabled:
        return

    client = request.client.host if request.client else "unknown"
    state = limiter.hit(client)
    headers = {
        "RateLimit-Limit": str(state.limit),
        "RateLimit-Remaining": str(state.remaining),
        "RateLimit-Reset": str(state.reset_seconds),
    }

    if not state.allowed:
        logger.warning("Rate limit exceeded", client=client, path=request.url.path)
        raise HTTPException(
            status_code=429,
            detail="Too many requests, please try again later.",
            headers={**headers, "Retry-After": str(state.reset_seconds)},
        )

    response.headers.update(headers)
