"""Per-page network request filtering."""

from typing import Tuple

from playwright.async_api import Page, Request, Route

from ..core.policy import BlockPolicy


class ResourceInterceptor:
    """Aborts ad, tracker and media requests before they leave the browser."""

    def __init__(
        self,
        policy: BlockPolicy,
        block_ads: bool = True,
        block_trackers: bool = True,
        block_media: bool = False,
    ):
        self.keywords: Tuple[str, ...] = tuple(k.lower() for k in policy.keywords if k)
        self.media_types = frozenset(policy.media_resource_types)
        self.block_ads = block_ads
        self.block_trackers = block_trackers
        self.block_media = block_media
        self.blocked = 0
        self.allowed = 0

    @property
    def enabled(self) -> bool:
        return self.block_ads or self.block_trackers or self.block_media

    def should_block(self, url: str, resource_type: str) -> bool:
        """Decide whether a request must be aborted."""
        if self.block_ads or self.block_trackers:
            lowered = url.lower()
            if any(keyword in lowered for keyword in self.keywords):
                return True

        if self.block_media and resource_type in self.media_types:
            return True

        return False

    @staticmethod
    def is_target_document(request: Request) -> bool:
        """True for the top-level navigation of the page being scraped."""
        return request.is_navigation_request() and request.frame.parent_frame is None

    async def handle(self, route: Route) -> None:
        """Route handler installed on the page."""
        request = route.request
        if self.is_target_document(request):
            self.allowed += 1
            await route.continue_()
        elif self.should_block(request.url, request.resource_type):
            self.blocked += 1
            await route.abort()
        else:
            self.allowed += 1
            await route.continue_()

    async def install(self, page: Page) -> bool:
        """Install the filter on ``page``; returns False when nothing is blocked."""
        if not self.enabled:
            return False

        await page.route("**/*", self.handle)
        return True

    def summary(self) -> dict:
        return {"blocked_requests": self.blocked, "allowed_requests": self.allowed}

