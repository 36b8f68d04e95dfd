"""Locators and assertions for design-system components on journey pages."""
from __future__ import annotations

import logging
from typing import Optional, Sequence

import anyio
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Locator, Page

from journey_harness.config import RunnerConfig
from journey_harness.errors import JourneyAssertionError, ToolError
from journey_harness.text import collapse_whitespace, text_matches

logger = logging.getLogger(__name__)


class ComponentHelper:
    """Convenience wrapper over a page for component-level lookups."""

    def __init__(self, page: Page, config: Optional[RunnerConfig] = None) -> None:
        self._page = page
        self._config = config or RunnerConfig()

    # ---- locators ----------------------------------------------------------
    def text_input(self, label: str) -> Locator:
        return self._page.get_by_label(label)

    def radio(self, label: str) -> Locator:
        return self._page.get_by_label(label)

    def checkbox(self, label: str) -> Locator:
        return self._page.get_by_label(label)

    def button(self, name: str) -> Locator:
        return self._page.get_by_role("button", name=name)

    def link(self, name: str) -> Locator:
        return self._page.get_by_role("link", name=name)

    def error_summary(self) -> Locator:
        return self._page.locator(".govuk-error-summary")

    def field_error(self, field_id: str) -> Locator:
        return self._page.locator(f"#{field_id}-error")

    def notification_banner(self) -> Locator:
        return self._page.locator(".govuk-notification-banner")

    def accordion_section(self, heading: str) -> Locator:
        return self._page.locator(
            ".govuk-accordion__section",
            has=self._page.get_by_role("button", name=heading),
        )

    def summary_list(self) -> Locator:
        return self._page.locator(".govuk-summary-list")

    def summary_row(self, key: str) -> Locator:
        return self._page.locator(
            ".govuk-summary-list__row",
            has=self._page.locator(".govuk-summary-list__key", has_text=key),
        )

    def panel(self) -> Locator:
        return self._page.locator(".govuk-panel")

    # ---- waits -------------------------------------------------------------
    async def wait_for_text(
        self,
        locator: Locator,
        expected: str,
        description: str,
        timeout: Optional[float] = None,
    ) -> str:
        """Poll until ``locator`` is visible and its text contains ``expected``."""
        timeout = self._config.action_timeout if timeout is None else timeout
        deadline = anyio.current_time() + timeout
        last_text = ""
        last_error: PlaywrightError | None = None

        while True:
            try:
                if await locator.count() and await locator.first.is_visible():
                    last_text = collapse_whitespace(await locator.first.text_content())
                    if text_matches(expected, last_text):
                        return last_text
            except PlaywrightError as exc:
                last_error = exc
            if anyio.current_time() >= deadline:
                break
            await anyio.sleep(self._config.poll_interval)

        message = f'Timed out waiting for "{expected}" in {description}; last text: "{last_text}"'
        if last_error:
            raise JourneyAssertionError(f"{message}. Last error: {last_error}") from last_error
        raise JourneyAssertionError(message)

    # ---- assertions --------------------------------------------------------
    async def verify_error_summary(self, expected_errors: Sequence[str]) -> None:
        summary = self.error_summary()
        if not expected_errors:
            try:
                await summary.first.wait_for(state="visible", timeout=self._config.action_timeout_ms)
            except PlaywrightError as exc:
                raise JourneyAssertionError("Error summary was not displayed") from exc
        for error in expected_errors:
            await self.wait_for_text(summary, error, "error summary")

    async def verify_field_error(self, field_id: str, message: str) -> None:
        await self.wait_for_text(self.field_error(field_id), message, f"#{field_id}-error")

    async def verify_notification(self, message: str) -> None:
        await self.wait_for_text(self.notification_banner(), message, "notification banner")

    async def expand_accordion(self, heading: str) -> None:
        button = self._page.get_by_role("button", name=heading)
        if await button.get_attribute("aria-expanded") != "true":
            await button.click()

    async def verify_summary_row(self, key: str, value: str) -> None:
        row_value = self.summary_row(key).locator(".govuk-summary-list__value")
        await self.wait_for_text(row_value, value, f'summary row "{key}"')

    async def click_change_link(self, key: str) -> None:
        row = self.summary_row(key)
        link = row.locator(".govuk-summary-list__actions a")
        if not await link.count():
            # Summary lists without an actions column: fall back to any Change link in the row.
            link = row.get_by_role("link", name="Change")
        try:
            await link.first.click(timeout=self._config.action_timeout_ms)
        except PlaywrightError as exc:
            raise ToolError(name="click_change_link", payload={"key": key}, message=str(exc))

    async def verify_panel_title(self, title: str) -> None:
        await self.wait_for_text(self.panel().locator(".govuk-panel__title"), title, "confirmation panel")
