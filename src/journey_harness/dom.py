"""Small read-only DOM helpers and the polling primitive used by all waits."""
from __future__ import annotations

import logging
from typing import Awaitable, Callable, List, Optional, TypeVar

import anyio
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Locator

from journey_harness.text import collapse_whitespace

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def any_visible(locator: Locator) -> bool:
    """True if any element matched by ``locator`` is visible.

    A lookup failure counts as "not visible".
    """
    try:
        for candidate in await locator.all():
            if await candidate.is_visible():
                return True
    except PlaywrightError as exc:
        logger.debug("Visibility check failed: %s", exc)
    return False


async def first_visible(locator: Locator) -> Optional[Locator]:
    for candidate in await locator.all():
        if await candidate.is_visible():
            return candidate
    return None


async def visible_texts(locator: Locator) -> List[str]:
    """Whitespace-collapsed text of every visible match, empty strings dropped."""
    texts: List[str] = []
    for candidate in await locator.all():
        if not await candidate.is_visible():
            continue
        text = collapse_whitespace(await candidate.text_content())
        if text:
            texts.append(text)
    return texts


async def safe_count(locator: Locator) -> int:
    try:
        return await locator.count()
    except PlaywrightError as exc:
        logger.debug("Count check failed: %s", exc)
        return 0


async def poll_until(
    check: Callable[[], Awaitable[Optional[T]]],
    timeout: float,
    interval: float,
) -> Optional[T]:
    """Call ``check`` until it returns something truthy or ``timeout`` elapses.

    The check always runs at least once. Returns the last truthy result, or
    ``None`` on timeout.
    """
    deadline = anyio.current_time() + timeout
    while True:
        result = await check()
        if result:
            return result
        if anyio.current_time() >= deadline:
            return None
        await anyio.sleep(interval)
