"""Step driver for multi-page journeys.

``JourneyRunner`` is the single point of interaction with one page for a
whole journey run. Journeys are single-page applications: advancing a step
does not change the URL, so every wait here waits for *content* (a button, a
heading, a landmark) and never for navigation.
"""
from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Mapping, Optional

import anyio
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeout

from journey_harness.components import ComponentHelper
from journey_harness.config import RunnerConfig
from journey_harness.dom import any_visible, first_visible, poll_until, visible_texts
from journey_harness.errors import JourneyAssertionError, SubmissionError, ToolError
from journey_harness.fields import FieldResolver, FieldValue
from journey_harness.patterns import BACK_LABEL, PatternDetector
from journey_harness.text import collapse_whitespace, normalize_for_match, text_matches

logger = logging.getLogger(__name__)

CONTINUE_LABEL = re.compile(r"^\s*continue\s*$", re.IGNORECASE)
SUBMIT_LABEL = re.compile(r"accept and send|continue", re.IGNORECASE)
AUTOFILL_LABEL = re.compile(r"auto-?fill", re.IGNORECASE)

CONFIRMATION_HEADING = "Application submitted"
CONFIRMATION_SELECTOR = ", ".join((
    f'h1:has-text("{CONFIRMATION_HEADING}")',
    ".govuk-panel--confirmation",
    ".govuk-panel__title",
))
ALTERNATE_CONFIRMATION_HEADING = re.compile(
    r"application (has been )?(submitted|sent|received|complete)"
    r"|has been (submitted|sent|received)"
    r"|submission (complete|received)",
    re.IGNORECASE,
)
REFERENCE_NUMBER = re.compile(r"APP-[A-Z0-9]+-[A-Z0-9]+")
SERVICE_ERROR_HEADING = re.compile(
    r"there (is|was) a problem|something went wrong|page not found|service unavailable|\berror\b",
    re.IGNORECASE,
)


class JourneyRunner:
    """Drive one journey: navigate, fill, advance, submit, go back, assert.

    Per-run state is a step counter (diagnostic only) and a key/value store
    for data captured mid-journey. Both are reset by ``start()``.
    """

    def __init__(
        self,
        page: Page,
        config: Optional[RunnerConfig] = None,
        components: Optional[ComponentHelper] = None,
    ) -> None:
        self._page = page
        self.config = config or RunnerConfig()
        self._page.set_default_timeout(self.config.action_timeout_ms)
        self._resolver = FieldResolver(page, self.config)
        self._detector = PatternDetector(page)
        self._components = components or ComponentHelper(page, self.config)
        self._current_step = 0
        self._journey_path = ""
        self._submitted = False
        self._data: Dict[str, Any] = {}

    @property
    def page(self) -> Page:
        return self._page

    @property
    def current_step(self) -> int:
        return self._current_step

    @property
    def journey_path(self) -> str:
        return self._journey_path

    @property
    def submitted(self) -> bool:
        return self._submitted

    # ---- navigation ---------------------------------------------------------
    async def start(self, journey_path: str) -> None:
        """Navigate to the journey entry point and reset run state."""
        url = self.config.url(journey_path)
        logger.info("Starting journey at %s", url)
        await self._goto(url)
        self._journey_path = journey_path
        self._current_step = 0
        self._submitted = False
        self._data.clear()

    async def _goto(self, url: str) -> None:
        timeout = self.config.action_timeout_ms
        try:
            await self._page.goto(url, wait_until="networkidle", timeout=timeout)
        except PlaywrightTimeout:
            # Long-polling dev servers never go network-idle.
            logger.debug("networkidle timed out for %s; retrying with domcontentloaded", url)
            try:
                await self._page.goto(url, wait_until="domcontentloaded", timeout=timeout)
            except PlaywrightError as exc:
                raise ToolError(name="start", payload={"url": url}, message=str(exc)) from exc
        except PlaywrightError as exc:
            raise ToolError(name="start", payload={"url": url}, message=str(exc)) from exc

    async def continue_(self) -> None:
        """Click the primary Continue button and advance the step counter."""
        button = await poll_until(
            lambda: first_visible(self._page.get_by_role("button", name=CONTINUE_LABEL)),
            self.config.action_timeout,
            self.config.poll_interval,
        )
        if button is None:
            raise ToolError(
                name="continue",
                payload={"step": self._current_step, "label": "Continue"},
                message=f"No visible Continue button within {self.config.action_timeout:g}s",
            )
        # Client-side validation runs asynchronously around the click.
        await anyio.sleep(self.config.settle_delay)
        await button.click()
        await anyio.sleep(self.config.settle_delay)
        self._current_step += 1
        logger.debug("Continued to step %d", self._current_step)

    async def go_back(self) -> None:
        """Use the Back button if visible, otherwise the Back link."""
        target = await first_visible(self._page.get_by_role("button", name=BACK_LABEL))
        if target is None:
            target = await first_visible(self._page.get_by_role("link", name=BACK_LABEL))
        if target is None:
            raise ToolError(
                name="go_back",
                payload={"step": self._current_step},
                message="Neither a Back button nor a Back link is visible",
            )
        await target.click()
        await anyio.sleep(self.config.settle_delay)
        if self._current_step == 0:
            logger.warning("go_back() at step 0 of %s; step counter left at 0", self._journey_path or "<journey>")
        else:
            self._current_step -= 1

    async def click_change(self, field_label: str) -> None:
        """Follow the change link for ``field_label`` on the review page."""
        await self._components.click_change_link(field_label)
        await anyio.sleep(self.config.settle_delay)

    async def autofill(self) -> bool:
        """Click the journey's auto-fill button when it offers one."""
        button = await first_visible(self._page.get_by_role("button", name=AUTOFILL_LABEL))
        if button is None:
            return False
        await button.click()
        return True

    # ---- filling ------------------------------------------------------------
    async def fill_step(self, data: Mapping[str, FieldValue]) -> None:
        """Fill every field of the current step.

        Values may be scalars, lists of checkbox labels, or dates given as
        ``{"day", "month", "year"}`` mappings or delimited strings.
        """
        for label, value in data.items():
            await self._fill_field(label, value)

    async def _fill_field(self, label: str, value: FieldValue) -> None:
        attempts = max(1, self.config.max_fill_attempts)
        last_error: Exception | None = None
        for attempt in range(1, attempts + 1):
            try:
                field = await self._resolver.resolve(label, value)
                await field.apply()
                logger.debug("Step %d: filled %r as %s", self._current_step, label, type(field).__name__)
                return
            except (ToolError, PlaywrightError) as exc:
                last_error = exc
                if attempt < attempts:
                    logger.warning("Filling %r failed (attempt %d/%d): %s", label, attempt, attempts, exc)
                    await anyio.sleep(self.config.settle_delay)

        if isinstance(last_error, ToolError):
            last_error.payload.setdefault("step", self._current_step)
            raise last_error
        raise ToolError(
            name="fill_step",
            payload={"field": label, "value": value, "step": self._current_step},
            message=str(last_error),
        ) from last_error

    async def fill_and_continue(self, data: Mapping[str, FieldValue]) -> None:
        await self.fill_step(data)
        await self.continue_()

    async def select_radio(self, label: str) -> None:
        await self._fill_field(label, True)

    async def select_radio_and_continue(self, label: str) -> None:
        await self.select_radio(label)
        await self.continue_()

    async def check_checkbox(self, label: str) -> None:
        await self._fill_field(label, True)

    async def complete_journey(self, steps: Mapping[str, Mapping[str, FieldValue]]) -> None:
        """Fill and continue each named step, storing its data under the name."""
        for step_name, step_data in steps.items():
            await self.fill_and_continue(step_data)
            self.store_data(step_name, dict(step_data))

    # ---- submission ---------------------------------------------------------
    async def submit(self) -> None:
        """Submit from the review page.

        Phase one waits for a confirmation landmark. If none appears within
        ``submission_timeout`` the named fallback decides: the submission
        counts as successful only if the review heading has gone and no error
        landmark is shown.
        """
        review_heading = await self._primary_heading()
        await self._click_submit_control()
        if not await self.wait_for_confirmation(self.config.submission_timeout):
            await self.submission_fallback(review_heading)
        self._current_step += 1
        self._submitted = True

    async def _click_submit_control(self) -> None:
        button = await poll_until(
            lambda: first_visible(self._page.get_by_role("button", name=SUBMIT_LABEL)),
            self.config.action_timeout,
            self.config.poll_interval,
        )
        if button is None:
            raise ToolError(
                name="submit",
                payload={"step": self._current_step, "label": "Accept and send|Continue"},
                message=f"No visible submit button within {self.config.action_timeout:g}s",
            )
        await button.click()

    async def _confirmation_visible(self) -> bool:
        if await any_visible(self._page.locator(CONFIRMATION_SELECTOR)):
            return True
        return await any_visible(self._page.get_by_role("heading", name=ALTERNATE_CONFIRMATION_HEADING))

    async def wait_for_confirmation(self, timeout: float) -> bool:
        """Wait up to ``timeout`` seconds for any confirmation landmark."""
        found = await poll_until(self._confirmation_visible, timeout, self.config.poll_interval)
        return bool(found)

    async def submission_fallback(self, review_heading: Optional[str]) -> None:
        """Decide a submission whose confirmation landmark never appeared.

        Raises:
            SubmissionError: errors are shown, the review heading is still
                present, or there was no review heading to compare against.
        """
        headings = await self.visible_headings()
        errors = await self._detector.get_error_messages()
        if errors:
            raise SubmissionError(
                f"Submission failed with errors: {', '.join(errors)}. Headings on page: {headings}"
            )
        failure_headings = [heading for heading in headings if SERVICE_ERROR_HEADING.search(heading)]
        if failure_headings:
            raise SubmissionError(
                f"Submission landed on an error page: {failure_headings}. Headings on page: {headings}"
            )
        if not review_heading:
            raise SubmissionError(
                f"No confirmation landmark within {self.config.submission_timeout:g}s and no "
                f"review heading was recorded to compare against. Headings on page: {headings}"
            )
        expected = normalize_for_match(review_heading)
        if any(normalize_for_match(heading) == expected for heading in headings):
            raise SubmissionError(
                f'No confirmation landmark within {self.config.submission_timeout:g}s and review '
                f'heading "{review_heading}" is still displayed. Headings on page: {headings}'
            )
        logger.warning(
            "No confirmation landmark within %gs but review heading %r has gone; "
            "treating submission as successful (headings now: %s)",
            self.config.submission_timeout,
            review_heading,
            headings,
        )

    # ---- assertions ---------------------------------------------------------
    async def visible_headings(self) -> List[str]:
        try:
            return await visible_texts(self._page.get_by_role("heading"))
        except PlaywrightError as exc:
            logger.debug("Heading read failed mid re-render: %s", exc)
            return []

    async def _primary_heading(self) -> Optional[str]:
        h1 = await first_visible(self._page.locator("h1"))
        if h1 is not None:
            return collapse_whitespace(await h1.text_content())
        headings = await self.visible_headings()
        return headings[0] if headings else None

    async def verify_heading(self, heading_text: str, timeout: Optional[float] = None) -> None:
        """Wait until any visible heading contains ``heading_text``.

        Typographic and straight quotes compare equal; matching is
        case-insensitive and whitespace tolerant.
        """
        timeout = self.config.heading_timeout if timeout is None else timeout
        seen: List[str] = []

        async def heading_shown() -> bool:
            seen[:] = await self.visible_headings()
            return any(text_matches(heading_text, heading) for heading in seen)

        if not await poll_until(heading_shown, timeout, self.config.poll_interval):
            raise JourneyAssertionError(
                f'Heading "{heading_text}" not found within {timeout:g}s at step '
                f"{self._current_step}. Headings on page: {seen}"
            )

    async def assert_on_step(self, heading_text: str) -> None:
        await self.verify_heading(heading_text)

    async def verify_text(self, text: str) -> None:
        locator = self._page.get_by_text(text)
        if not await poll_until(lambda: any_visible(locator), self.config.action_timeout, self.config.poll_interval):
            raise JourneyAssertionError(f'Text "{text}" not visible within {self.config.action_timeout:g}s')

    async def wait_for(self, selector: str, timeout: Optional[float] = None) -> None:
        timeout = self.config.action_timeout if timeout is None else timeout
        try:
            await self._page.locator(selector).first.wait_for(state="visible", timeout=timeout * 1000)
        except PlaywrightTimeout as exc:
            raise JourneyAssertionError(f"Selector '{selector}' not visible within {timeout:g}s") from exc

    async def get_validation_errors(self) -> Dict[str, str]:
        """Map field id (from the error summary link target) to its message."""
        errors: Dict[str, str] = {}
        for link in await self._page.locator(".govuk-error-summary a").all():
            href = await link.get_attribute("href") or ""
            text = collapse_whitespace(await link.text_content())
            if href and text:
                errors[href.lstrip("#")] = text
        return errors

    async def verify_confirmation(self, expected_title: str = CONFIRMATION_HEADING) -> None:
        await self._components.verify_panel_title(expected_title)

    async def get_reference_number(self) -> Optional[str]:
        body = self._page.locator(".govuk-panel__body")
        if not await body.count():
            return None
        match = REFERENCE_NUMBER.search(await body.first.text_content() or "")
        return match.group(0) if match else None

    # ---- run data -----------------------------------------------------------
    def store_data(self, key: str, value: Any) -> None:
        self._data[key] = value

    def get_data(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def all_data(self) -> Dict[str, Any]:
        return dict(self._data)

    def clear_data(self) -> None:
        self._data.clear()
