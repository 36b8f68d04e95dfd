import sys
from pathlib import Path

import pytest
import pytest_asyncio
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT / "src") not in sys.path:
    sys.path.insert(0, str(ROOT / "src"))

from journey_harness.blocks import JourneyContext
from journey_harness.components import ComponentHelper
from journey_harness.config import RunnerConfig
from journey_harness.runner import JourneyRunner


@pytest.fixture
def fast_config() -> RunnerConfig:
    """Short ceilings so negative-path tests fail quickly."""
    return RunnerConfig(
        base_url="http://journey.test",
        submission_timeout=1.5,
        heading_timeout=2.0,
        action_timeout=2.0,
        settle_delay=0.2,
        poll_interval=0.05,
    )


@pytest_asyncio.fixture()
async def page():
    """Headless Chromium page; skips the test when no browser can be launched."""
    playwright = await async_playwright().start()
    try:
        browser = await playwright.chromium.launch(headless=True)
    except PlaywrightError as exc:
        await playwright.stop()
        pytest.skip(f"Chromium not available: {exc}")
    context = await browser.new_context()
    page = await context.new_page()
    try:
        yield page
    finally:
        await context.close()
        await browser.close()
        await playwright.stop()


@pytest.fixture
def components(page, fast_config) -> ComponentHelper:
    return ComponentHelper(page, fast_config)


@pytest.fixture
def runner(page, fast_config, components) -> JourneyRunner:
    return JourneyRunner(page, fast_config, components)


@pytest.fixture
def context(page, runner, components) -> JourneyContext:
    return JourneyContext(page=page, runner=runner, components=components)


@pytest.fixture
def load_page(page):
    """Load an HTML document into the test page."""

    async def load(html: str) -> None:
        await page.set_content(html)

    return load
