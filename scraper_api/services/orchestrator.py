"""Public scrape entry point."""

import asyncio
import time
from typing import Awaitable, Callable, List, Optional, Sequence

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ..core.config import Settings, get_settings
from ..core.exceptions import NavigationError, ScraperError
from ..core.logging import ScrapeLogger, get_logger
from ..core.policy import BlockPolicy
from ..models.scrape import FieldDescriptor, ResultBundle, ScrapeOptions
from .field_extractor import FieldExtractor
from .interceptor import ResourceInterceptor
from .result_cache import ResultCache
from .retry import retry_async
from .session_manager import SessionManager

logger = get_logger(__name__)


class ScrapeOrchestrator:
    """Cache lookup, retried page scrape, cache write.

    One attempt walks ``idle -> session_ready -> page_open -> navigated ->
    extracted -> closed``; a failure after the session is ready goes to
    ``failed`` and still closes the page before the error is re-raised.
    The whole attempt is what gets retried, so a dead browser or context is
    rebuilt by the next ``ensure_ready``.
    """

    def __init__(
        self,
        session: SessionManager,
        cache: ResultCache,
        block_policy: BlockPolicy,
        extractor: Optional[FieldExtractor] = None,
        settings: Optional[Settings] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.session = session
        self.cache = cache
        self.block_policy = block_policy
        self.extractor = extractor or FieldExtractor()
        self.settings = settings or get_settings()
        self._sleep = sleep

    async def scrape(
        self,
        target: str,
        descriptors: Sequence[FieldDescriptor],
        options: Optional[ScrapeOptions] = None,
    ) -> ResultBundle:
        """Scrape ``target`` and extract every descriptor.

        Raises ``RetryExhaustedError`` when every attempt fails.
        """
        options = options or ScrapeOptions()
        descriptors = list(descriptors)
        started = time.perf_counter()
        scrape_log = ScrapeLogger(target)

        cache_key = None
        if options.use_cache:
            cache_key = self.cache.fingerprint(target, descriptors)
            cached = self.cache.get(cache_key)
            if cached is not None:
                scrape_log.info("Cache hit")
                return cached.model_copy(deep=True, update={
                    "from_cache": True,
                    "execution_time": time.perf_counter() - started,
                })

        attempt_number = 0

        async def attempt() -> ResultBundle:
            nonlocal attempt_number
            attempt_number += 1
            scrape_log.bind_attempt(attempt_number)
            return await self._attempt(target, descriptors, options, scrape_log)

        bundle = await retry_async(
            attempt,
            max_attempts=self.settings.max_retries,
            delay_ms=self.settings.retry_delay_ms,
            sleep=self._sleep,
            name="scrape",
        )
        bundle.execution_time = time.perf_counter() - started

        if cache_key is not None:
            self.cache.set(cache_key, bundle.model_copy(deep=True))

        scrape_log.info(
            "Scrape completed",
            fields=len(bundle.data),
            execution_time=round(bundle.execution_time, 3),
        )
        return bundle

    async def scrape_safe(
        self,
        target: str,
        descriptors: Sequence[FieldDescriptor],
        options: Optional[ScrapeOptions] = None,
    ) -> ResultBundle:
        """Like ``scrape`` but reports scrape failures inside the bundle."""
        started = time.perf_counter()
        try:
            return await self.scrape(target, descriptors, options)
        except ScraperError as e:
            logger.error("Scrape failed", url=target, error=str(e))
            return ResultBundle(
                url=target,
                data={d.name: d.empty_value for d in descriptors},
                error=str(e),
                execution_time=time.perf_counter() - started,
            )

    async def _attempt(
        self,
        target: str,
        descriptors: List[FieldDescriptor],
        options: ScrapeOptions,
        scrape_log: ScrapeLogger,
    ) -> ResultBundle:
        scrape_log.state("idle")
        page: Optional[Page] = None
        try:
            await self.session.ensure_ready()
            scrape_log.state("session_ready")

            page = await self.session.new_page()
            scrape_log.state("page_open")

            if options.user_agent:
                await page.set_extra_http_headers({"User-Agent": options.user_agent})

            interceptor = ResourceInterceptor(
                self.block_policy,
                block_ads=options.block_ads,
                block_trackers=options.block_trackers,
                block_media=options.block_media,
            )
            await interceptor.install(page)

            await self._navigate(page, target, options)
            scrape_log.state("navigated")

            title = await self._page_title(page)
            data = await self.extractor.extract_all(page, descriptors)
            scrape_log.state("extracted", **interceptor.summary())

            return ResultBundle(url=target, title=title, data=data)

        except Exception as e:
            scrape_log.state("failed", error=str(e)[:200])
            raise

        finally:
            if page is not None:
                await self._close_page(page, scrape_log)
                scrape_log.state("closed")

    async def _navigate(self, page: Page, target: str, options: ScrapeOptions) -> None:
        try:
            await page.goto(
                target,
                wait_until="domcontentloaded",
                timeout=options.timeout_ms,
                referer=self.settings.navigation_referer,
            )
        except PlaywrightError as e:
            raise NavigationError(target, str(e)) from e

        if not options.wait_for_idle:
            return

        idle_timeout = min(options.timeout_ms, self.settings.network_idle_cap_ms)
        try:
            await page.wait_for_load_state("networkidle", timeout=idle_timeout)
        except PlaywrightTimeoutError:
            logger.info(
                "Network idle timeout exceeded, continuing anyway",
                url=target,
                timeout_ms=idle_timeout,
            )

    async def _page_title(self, page: Page) -> str:
        try:
            return await page.title()
        except Exception as e:
            logger.debug("Failed to read page title", error=str(e))
            return ""

    async def _close_page(self, page: Page, scrape_log: ScrapeLogger) -> None:
        try:
            await page.close()
        except Exception as e:
            scrape_log.warning("Failed to close page", error=str(e))

    def clear_cache(self, target: Optional[str] = None) -> int:
        return self.cache.clear(target)

    async def shutdown(self) -> None:
        await self.session.shutdown()
