"""Tests for the shared browser session lifecycle."""

import asyncio
from typing import List, Optional

import pytest

from scraper_api.core.exceptions import SessionError
from scraper_api.services.session_manager import SessionManager


class FakeContext:
    def __init__(self, close_error: Optional[Exception] = None):
        self.options = {}
        self.default_timeout = None
        self.close_error = close_error
        self.closed = False
        self.pages = 0

    def set_default_timeout(self, timeout: float) -> None:
        self.default_timeout = timeout

    async def new_page(self):
        self.pages += 1
        return object()

    async def close(self) -> None:
        self.closed = True
        if self.close_error is not None:
            raise self.close_error


class FakeBrowser:
    def __init__(self, context_error: Optional[Exception] = None,
                 context_close_error: Optional[Exception] = None):
        self.connected = True
        self.closed = False
        self.context_error = context_error
        self.context_close_error = context_close_error
        self.contexts: List[FakeContext] = []

    def is_connected(self) -> bool:
        return self.connected

    async def new_context(self, **options) -> FakeContext:
        await asyncio.sleep(0)
        if self.context_error is not None:
            raise self.context_error
        context = FakeContext(close_error=self.context_close_error)
        context.options = options
        self.contexts.append(context)
        return context

    async def close(self) -> None:
        self.closed = True
        self.connected = False


class FakeChromium:
    def __init__(self, browser_kwargs=None, launch_error: Optional[Exception] = None):
        self.browser_kwargs = browser_kwargs or {}
        self.launch_error = launch_error
        self.launches: List[dict] = []
        self.browsers: List[FakeBrowser] = []

    async def launch(self, **kwargs) -> FakeBrowser:
        self.launches.append(kwargs)
        # Yield so concurrent callers can interleave during launch.
        await asyncio.sleep(0)
        if self.launch_error is not None:
            raise self.launch_error
        browser = FakeBrowser(**self.browser_kwargs)
        self.browsers.append(browser)
        return browser


class FakePlaywright:
    def __init__(self, chromium: FakeChromium):
        self.chromium = chromium
        self.stopped = 0

    async def stop(self) -> None:
        self.stopped += 1


class FakeStealth:
    def __init__(self):
        self.applied: List[FakeContext] = []

    async def apply_stealth_async(self, context: FakeContext) -> None:
        self.applied.append(context)


class FakeDriver:
    def __init__(self, playwright: FakePlaywright):
        self.playwright = playwright

    async def start(self) -> FakePlaywright:
        return self.playwright


def make_manager(settings, chromium: FakeChromium, launch_args=None, stealth=None):
    playwright = FakePlaywright(chromium)
    stealth = stealth or FakeStealth()
    manager = SessionManager(
        launch_args=launch_args or ["--disable-gpu", "--no-sandbox"],
        settings=settings,
        driver_factory=lambda: FakeDriver(playwright),
        stealth_factory=lambda: stealth,
    )
    return manager, playwright


@pytest.mark.asyncio
async def test_ensure_ready_launches_once(settings):
    chromium = FakeChromium()
    manager, _ = make_manager(settings, chromium)

    first = await manager.ensure_ready()
    second = await manager.ensure_ready()

    assert first is second
    assert len(chromium.launches) == 1
    assert manager.is_ready


@pytest.mark.asyncio
async def test_launch_and_context_options(settings):
    chromium = FakeChromium()
    stealth = FakeStealth()
    manager, _ = make_manager(settings, chromium, launch_args=["--disable-gpu"], stealth=stealth)

    context = await manager.ensure_ready()

    assert chromium.launches == [{"headless": True, "args": ["--disable-gpu"]}]
    assert context.options["user_agent"] == settings.browser_user_agent
    assert context.options["locale"] == settings.browser_locale
    assert context.options["viewport"] == {
        "width": settings.viewport_width,
        "height": settings.viewport_height,
    }
    assert context.default_timeout == settings.default_timeout_ms
    assert stealth.applied == [context]


@pytest.mark.asyncio
async def test_stealth_applied_to_shared_context(settings):
    chromium = FakeChromium()
    stealth = FakeStealth()
    manager, _ = make_manager(settings, chromium, stealth=stealth)

    context = await manager.ensure_ready()
    await manager.ensure_ready()

    assert stealth.applied == [context]


@pytest.mark.asyncio
async def test_stealth_can_be_disabled(settings):
    chromium = FakeChromium()
    stealth = FakeStealth()
    manager, _ = make_manager(
        settings.model_copy(update={"browser_stealth": False}), chromium, stealth=stealth
    )

    await manager.ensure_ready()

    assert stealth.applied == []


@pytest.mark.asyncio
async def test_concurrent_initialization_is_serialized(settings):
    chromium = FakeChromium()
    manager, _ = make_manager(settings, chromium)

    contexts = await asyncio.gather(*[manager.ensure_ready() for _ in range(10)])

    assert len(chromium.launches) == 1
    assert all(c is contexts[0] for c in contexts)


@pytest.mark.asyncio
async def test_new_page_uses_shared_context(settings):
    chromium = FakeChromium()
    manager, _ = make_manager(settings, chromium)

    await manager.new_page()
    await manager.new_page()

    assert chromium.browsers[0].contexts[0].pages == 2


@pytest.mark.asyncio
async def test_launch_failure_raises_session_error(settings):
    chromium = FakeChromium(launch_error=RuntimeError("Executable doesn't exist"))
    manager, playwright = make_manager(settings, chromium)

    with pytest.raises(SessionError):
        await manager.ensure_ready()

    assert not manager.is_ready
    assert manager.context is None
    assert playwright.stopped == 1


@pytest.mark.asyncio
async def test_context_failure_tears_down_browser(settings):
    chromium = FakeChromium(browser_kwargs={"context_error": RuntimeError("context crashed")})
    manager, _ = make_manager(settings, chromium)

    with pytest.raises(SessionError):
        await manager.ensure_ready()

    assert chromium.browsers[0].closed
    assert manager.context is None


@pytest.mark.asyncio
async def test_disconnected_browser_is_relaunched(settings):
    chromium = FakeChromium()
    manager, _ = make_manager(settings, chromium)

    await manager.ensure_ready()
    chromium.browsers[0].connected = False
    assert not manager.is_ready

    await manager.ensure_ready()

    assert len(chromium.launches) == 2
    assert manager.is_ready
    assert manager.launch_count == 2


@pytest.mark.asyncio
async def test_shutdown_is_fault_tolerant(settings):
    chromium = FakeChromium(browser_kwargs={"context_close_error": RuntimeError("already closed")})
    manager, playwright = make_manager(settings, chromium)
    await manager.ensure_ready()

    await manager.shutdown()

    browser = chromium.browsers[0]
    assert browser.contexts[0].closed
    assert browser.closed
    assert playwright.stopped == 1
    assert manager.context is None
    assert not manager.is_ready


@pytest.mark.asyncio
async def test_ensure_ready_after_shutdown_reinitializes(settings):
    chromium = FakeChromium()
    manager, _ = make_manager(settings, chromium)

    await manager.ensure_ready()
    await manager.shutdown()
    await manager.shutdown()
    await manager.ensure_ready()

    assert len(chromium.launches) == 2
    assert manager.is_ready
