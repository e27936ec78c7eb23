"""Lifecycle of the shared headless browser and its browsing context."""

import asyncio
from typing import Any, Callable, List, Optional

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright
from playwright_stealth import Stealth

from ..core.config import Settings, get_settings
from ..core.exceptions import SessionError
from ..core.logging import get_logger

logger = get_logger(__name__)


class SessionManager:
    """Owns one Chromium process and one shared context.

    Both are created lazily by ``ensure_ready`` and reused by every scrape
    until ``shutdown``. Initialization is serialized so concurrent callers
    never launch a second browser.
    """

    def __init__(
        self,
        launch_args: Optional[List[str]] = None,
        settings: Optional[Settings] = None,
        driver_factory: Callable[[], Any] = async_playwright,
        stealth_factory: Callable[[], Any] = Stealth,
    ):
        self.settings = settings or get_settings()
        self.launch_args = list(launch_args or [])
        self._driver_factory = driver_factory
        self._stealth_factory = stealth_factory
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._lock = asyncio.Lock()
        self.launch_count = 0

    @property
    def is_ready(self) -> bool:
        return (
            self._context is not None
            and self._browser is not None
            and self._browser.is_connected()
        )

    @property
    def context(self) -> Optional[BrowserContext]:
        return self._context

    async def ensure_ready(self) -> BrowserContext:
        """Launch the browser and create the shared context if needed."""
        if self.is_ready:
            return self._context

        async with self._lock:
            if self.is_ready:
                return self._context

            if self._browser is not None and not self._browser.is_connected():
                logger.warning("Browser disconnected, re-launching")
                await self._teardown()

            try:
                if self._browser is None:
                    await self._launch()
                if self._context is None:
                    await self._create_context()
            except Exception as e:
                logger.error("Failed to initialize browser session", error=str(e))
                await self._teardown()
                raise SessionError(f"Browser session initialization failed: {e}") from e

            return self._context

    async def new_page(self) -> Page:
        """Open a fresh page in the shared context."""
        context = await self.ensure_ready()
        return await context.new_page()

    async def _launch(self) -> None:
        if self._playwright is None:
            self._playwright = await self._driver_factory().start()

        self._browser = await self._playwright.chromium.launch(
            headless=self.settings.browser_headless,
            args=self.launch_args,
        )
        self.launch_count += 1

        logger.info(
            "Launched browser",
            headless=self.settings.browser_headless,
            launch_args=len(self.launch_args),
        )

    async def _create_context(self) -> None:
        settings = self.settings
        self._context = await self._browser.new_context(
            user_agent=settings.browser_user_agent,
            viewport={"width": settings.viewport_width, "height": settings.viewport_height},
            locale=settings.browser_locale,
            ignore_https_errors=settings.ignore_https_errors,
            java_script_enabled=True,
        )
        self._context.set_default_timeout(settings.default_timeout_ms)

        if settings.browser_stealth:
            await self._stealth_factory().apply_stealth_async(self._context)

        logger.info(
            "Created browser context",
            locale=settings.browser_locale,
            viewport=f"{settings.viewport_width}x{settings.viewport_height}",
            stealth=settings.browser_stealth,
        )

    async def _teardown(self) -> None:
        context, browser, driver = self._context, self._browser, self._playwright
        self._context = None
        self._browser = None
        self._playwright = None

        if context is not None:
            try:
                await context.close()
            except Exception as e:
                logger.warning("Failed to close browser context", error=str(e))

        if browser is not None:
            try:
                await browser.close()
            except Exception as e:
                logger.warning("Failed to close browser", error=str(e))

        if driver is not None:
            try:
                await driver.stop()
            except Exception as e:
                logger.warning("Failed to stop playwright driver", error=str(e))

    async def shutdown(self) -> None:
        """Close context, browser and driver; safe to call repeatedly."""
        async with self._lock:
            await self._teardown()
        logger.info("Browser session shut down")
