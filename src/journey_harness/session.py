"""
Browser session management for journey runs.

``PlaywrightClient`` launches Playwright in-process and owns the browser,
context and default page. ``journey_session`` wraps it and yields a ready
``JourneyContext`` for one run.

Usage:
    from journey_harness.session import journey_session

    async with journey_session() as context:
        await context.runner.start("/register-an-aircraft")
        await context.runner.select_radio_and_continue("An individual")
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright

from journey_harness.blocks import JourneyContext
from journey_harness.components import ComponentHelper
from journey_harness.config import HarnessSettings, load_settings
from journey_harness.runner import JourneyRunner

logger = logging.getLogger(__name__)

BROWSER_TYPES = ("chromium", "firefox", "webkit")


class PlaywrightClient:
    """
    In-process Playwright client.

    Example:
        async with PlaywrightClient(settings) as client:
            await client.page.goto("http://localhost:5173/start")
    """

    def __init__(self, settings: Optional[HarnessSettings] = None):
        self.settings = settings or HarnessSettings()
        if self.settings.browser_type not in BROWSER_TYPES:
            raise ValueError(
                f"Unsupported browser type {self.settings.browser_type!r}; expected one of {BROWSER_TYPES}"
            )

        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None

    async def __aenter__(self) -> "PlaywrightClient":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def connect(self) -> None:
        """Launch the browser and open a default context and page."""
        settings = self.settings
        self._playwright = await async_playwright().start()
        launcher = getattr(self._playwright, settings.browser_type)
        logger.debug("Launching %s (headless=%s)", settings.browser_type, settings.headless)
        self._browser = await launcher.launch(headless=settings.headless)

        self._context = await self._browser.new_context(
            viewport={"width": settings.viewport_width, "height": settings.viewport_height},
        )
        self._context.set_default_timeout(settings.runner.action_timeout_ms)
        self._page = await self._context.new_page()

    async def new_page(self) -> Page:
        if not self._context:
            raise RuntimeError("Client not connected. Use 'async with' or call connect()")
        return await self._context.new_page()

    async def close(self) -> None:
        """Close page, context, browser and Playwright, in that order."""
        if self._page:
            await self._page.close()
            self._page = None

        if self._context:
            await self._context.close()
            self._context = None

        if self._browser:
            await self._browser.close()
            self._browser = None

        if self._playwright:
            await self._playwright.stop()
            self._playwright = None

    @property
    def browser(self) -> Browser:
        if not self._browser:
            raise RuntimeError("Client not connected")
        return self._browser

    @property
    def page(self) -> Page:
        if not self._page:
            raise RuntimeError("Client not connected or page not created")
        return self._page


@asynccontextmanager
async def journey_session(settings: Optional[HarnessSettings] = None) -> AsyncIterator[JourneyContext]:
    """
    Yield a ``JourneyContext`` over a freshly launched browser.

    Args:
        settings: Launch and runner settings; ``load_settings()`` when omitted.
    """
    settings = settings or load_settings()
    async with PlaywrightClient(settings) as client:
        page = client.page
        components = ComponentHelper(page, settings.runner)
        runner = JourneyRunner(page, settings.runner, components)
        yield JourneyContext(page=page, runner=runner, components=components)
