"""Shared fixtures and in-memory stand-ins for Playwright objects."""

import asyncio
from typing import Any, Dict, List, Optional

import pytest
from playwright.async_api import Error as PlaywrightError

from scraper_api.core.config import Settings
from scraper_api.core.policy import BlockPolicy
from scraper_api.services.orchestrator import ScrapeOrchestrator
from scraper_api.services.result_cache import ResultCache


class FakeElement:
    """Element handle exposing the extraction primitives the extractor uses."""

    def __init__(
        self,
        text: Optional[str] = None,
        html: str = "",
        attrs: Optional[Dict[str, str]] = None,
        inner_text: Optional[str] = None,
        fail: bool = False,
    ):
        self.text = text
        self.html = html
        self.attrs = attrs or {}
        self._inner_text = inner_text if inner_text is not None else (text or "")
        self.fail = fail

    def _check(self) -> None:
        if self.fail:
            raise RuntimeError("Element is not attached to the DOM")

    async def text_content(self) -> Optional[str]:
        self._check()
        return self.text

    async def inner_text(self) -> str:
        self._check()
        return self._inner_text

    async def inner_html(self) -> str:
        self._check()
        return self.html

    async def get_attribute(self, name: str) -> Optional[str]:
        self._check()
        return self.attrs.get(name)


class FakeFrame:
    def __init__(self, parent_frame: Optional["FakeFrame"] = None):
        self.parent_frame = parent_frame


MAIN_FRAME = FakeFrame()


class FakeRequest:
    def __init__(self, url: str, resource_type: str, navigation: bool = False,
                 frame: FakeFrame = MAIN_FRAME):
        self.url = url
        self.resource_type = resource_type
        self.navigation = navigation
        self.frame = frame

    def is_navigation_request(self) -> bool:
        return self.navigation


class FakeRoute:
    def __init__(self, url: str, resource_type: str = "script", navigation: bool = False,
                 frame: FakeFrame = MAIN_FRAME):
        self.request = FakeRequest(url, resource_type, navigation, frame)
        self.aborted = False
        self.continued = False

    async def abort(self) -> None:
        self.aborted = True

    async def continue_(self) -> None:
        self.continued = True


class FakePage:
    """Page whose DOM is a selector -> elements mapping.

    ``subresources`` are requests issued during ``goto``; each one that the
    installed route handler lets through adds its elements to the DOM.
    """

    def __init__(
        self,
        dom: Optional[Dict[str, List[FakeElement]]] = None,
        title: str = "Test Page",
        goto_error: Optional[BaseException] = None,
        idle_error: Optional[BaseException] = None,
        invalid_selectors: Optional[List[str]] = None,
        subresources: Optional[List[tuple]] = None,
    ):
        self.dom = dict(dom or {})
        self._title = title
        self.goto_error = goto_error
        self.idle_error = idle_error
        self.invalid_selectors = set(invalid_selectors or [])
        self.subresources = subresources or []
        self.route_handler = None
        self.document_route: Optional[FakeRoute] = None
        self.routes: List[FakeRoute] = []
        self.goto_calls: List[Dict[str, Any]] = []
        self.idle_calls: List[Dict[str, Any]] = []
        self.extra_headers: Dict[str, str] = {}
        self.close_calls = 0

    async def route(self, pattern: str, handler) -> None:
        self.route_handler = handler

    async def set_extra_http_headers(self, headers: Dict[str, str]) -> None:
        self.extra_headers.update(headers)

    async def goto(self, url: str, **kwargs) -> None:
        self.goto_calls.append({"url": url, **kwargs})
        if self.goto_error is not None:
            raise self.goto_error

        if self.route_handler is not None:
            self.document_route = FakeRoute(url, "document", navigation=True)
            await self.route_handler(self.document_route)
            if self.document_route.aborted:
                raise PlaywrightError(f"net::ERR_FAILED at {url}")

        for resource_url, resource_type, selector, elements in self.subresources:
            route = FakeRoute(resource_url, resource_type)
            self.routes.append(route)
            if self.route_handler is not None:
                await self.route_handler(route)
            if self.route_handler is None or route.continued:
                self.dom.setdefault(selector, []).extend(elements)

    async def wait_for_load_state(self, state: str, timeout: Optional[float] = None) -> None:
        self.idle_calls.append({"state": state, "timeout": timeout})
        if self.idle_error is not None:
            raise self.idle_error

    async def query_selector_all(self, query: str) -> List[FakeElement]:
        if query in self.invalid_selectors:
            raise ValueError(f"'{query}' is not a valid selector")
        return list(self.dom.get(query, []))

    async def title(self) -> str:
        return self._title

    async def close(self) -> None:
        self.close_calls += 1


class FakeSession:
    """Session manager stand-in handing out pages from a factory."""

    def __init__(self, page_factory, ensure_errors: Optional[List[BaseException]] = None):
        self.page_factory = page_factory
        self.ensure_errors = list(ensure_errors or [])
        self.ready_calls = 0
        self.pages: List[FakePage] = []
        self.shutdown_calls = 0
        self.launch_count = 0

    @property
    def is_ready(self) -> bool:
        return self.ready_calls > 0 and self.shutdown_calls == 0

    async def ensure_ready(self) -> None:
        self.ready_calls += 1
        if self.ensure_errors:
            raise self.ensure_errors.pop(0)
        self.launch_count = max(self.launch_count, 1)

    async def new_page(self) -> FakePage:
        page = self.page_factory()
        self.pages.append(page)
        return page

    async def shutdown(self) -> None:
        self.shutdown_calls += 1


class SleepRecorder:
    """Replacement for asyncio.sleep that only records requested delays."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)
        await asyncio.sleep(0)


def hello_page() -> FakePage:
    return FakePage(
        dom={
            "h1": [FakeElement(text="Hello")],
            "a": [
                FakeElement(text="x", attrs={"href": "/x"}),
                FakeElement(text="y", attrs={"href": "/y"}),
                FakeElement(text="z", attrs={"href": "/z"}),
            ],
        },
        title="Hello page",
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        max_retries=2,
        retry_delay_ms=50,
        default_timeout_ms=30000,
        network_idle_cap_ms=10000,
        cache_ttl_seconds=1800,
        log_format="console",
    )


@pytest.fixture
def block_policy() -> BlockPolicy:
    return BlockPolicy(
        keywords=["ads", "analytics", "doubleclick", "googletagmanager"],
        media_resource_types=["image", "media", "font"],
    )


@pytest.fixture
def sleeper() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def make_orchestrator(settings, block_policy, sleeper):
    def _make(session: FakeSession, cache: Optional[ResultCache] = None) -> ScrapeOrchestrator:
        return ScrapeOrchestrator(
            session=session,
            cache=cache or ResultCache(ttl_seconds=settings.cache_ttl_seconds),
            block_policy=block_policy,
            settings=settings,
            sleep=sleeper,
        )
    return _make
