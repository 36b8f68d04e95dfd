"""Step blocks for recurring design-system page patterns.

Start pages, question pages, check-your-answers, task lists, confirmation
pages, navigation components (tabs, pagination, breadcrumbs), banners and the
content components journeys commonly show.
"""
from __future__ import annotations

import logging
import re
from typing import Any, Mapping, Optional, Sequence

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Locator

from journey_harness.blocks import JourneyContext, StepBlock
from journey_harness.dom import any_visible
from journey_harness.errors import JourneyAssertionError, ToolError
from journey_harness.fields import DateParts
from journey_harness.text import collapse_whitespace

START_LABEL = re.compile(r"start now|continue", re.IGNORECASE)
TASK_STATUSES = ("Not started", "In progress", "Completed")
PHASES = ("Alpha", "Beta")

ACTIVE_TAB_PANEL = ".govuk-tabs__panel:not([hidden]):not(.govuk-tabs__panel--hidden)"
NEXT_LABEL = re.compile(r"^\s*next\b", re.IGNORECASE)
PREVIOUS_LABEL = re.compile(r"^\s*previous\b", re.IGNORECASE)
FEEDBACK_LABEL = re.compile(r"feedback", re.IGNORECASE)
ACCEPT_COOKIES_LABEL = re.compile(r"^\s*accept\b", re.IGNORECASE)
REJECT_COOKIES_LABEL = re.compile(r"^\s*reject\b", re.IGNORECASE)

logger = logging.getLogger(__name__)


def start_page(heading: str = "Before you start") -> StepBlock:
    """Verify the start page and press its Start now button."""

    async def block(context: JourneyContext) -> None:
        await context.runner.verify_heading(heading)
        start = context.page.get_by_role("button", name=START_LABEL)
        if not await start.count():
            # The design system renders the start button as a link styled as a button.
            start = context.page.get_by_role("link", name=START_LABEL)
        await start.first.click()

    return block


def yes_no_question(question: str, answer: str) -> StepBlock:
    if answer not in ("Yes", "No"):
        raise ValueError(f"answer must be 'Yes' or 'No', got {answer!r}")
    return multiple_choice(question, answer)


def multiple_choice(question: str, option: str) -> StepBlock:
    async def block(context: JourneyContext) -> None:
        await context.runner.verify_heading(question)
        await context.runner.select_radio(option)
        await context.runner.continue_()

    return block


def checkbox_list(question: str, options: Sequence[str]) -> StepBlock:
    options = list(options)

    async def block(context: JourneyContext) -> None:
        await context.runner.verify_heading(question)
        await context.runner.fill_step({question: options})
        await context.runner.continue_()

    return block


def date_input(question: str, date: Any) -> StepBlock:
    """Answer a date question; ``date`` may be a mapping, ``date`` or string."""
    parts = DateParts.parse(date)

    async def block(context: JourneyContext) -> None:
        await context.runner.verify_heading(question)
        await context.runner.fill_step({question: {"day": parts.day, "month": parts.month, "year": parts.year}})
        await context.runner.continue_()

    return block


def verify_summary_rows(rows: Mapping[str, str]) -> StepBlock:
    rows = dict(rows)

    async def block(context: JourneyContext) -> None:
        for key, value in rows.items():
            await context.components.verify_summary_row(key, value)

    return block


def change_answers(changes: Mapping[str, Any]) -> StepBlock:
    """Change each answer from the review page, one field per change page."""
    changes = dict(changes)

    async def block(context: JourneyContext) -> None:
        for key, new_value in changes.items():
            await context.runner.click_change(key)
            await context.runner.fill_step({key: new_value})
            await context.runner.continue_()

    return block


def select_task(task_name: str) -> StepBlock:
    async def block(context: JourneyContext) -> None:
        await context.page.get_by_role("link", name=task_name).click()

    return block


def verify_task_status(task_name: str, status: str) -> StepBlock:
    if status not in TASK_STATUSES:
        raise ValueError(f"status must be one of {TASK_STATUSES}, got {status!r}")

    async def block(context: JourneyContext) -> None:
        task = context.page.locator(".govuk-task-list__item", has=context.page.get_by_text(task_name))
        tag = task.locator(".govuk-task-list__status")
        try:
            await tag.first.wait_for(state="visible", timeout=context.runner.config.action_timeout_ms)
        except PlaywrightError as exc:
            raise ToolError(name="verify_task_status", payload={"task": task_name}, message=str(exc)) from exc
        actual = collapse_whitespace(await tag.first.text_content())
        if status not in actual:
            raise JourneyAssertionError(
                f'Expected task "{task_name}" to have status "{status}" but got "{actual}"'
            )

    return block


def verify_success_notification(message: str) -> StepBlock:
    async def block(context: JourneyContext) -> None:
        await context.components.verify_notification(message)

    return block


def _verify_in(selector: str, description: str, text: str) -> StepBlock:
    async def block(context: JourneyContext) -> None:
        await context.components.wait_for_text(context.page.locator(selector), text, description)

    return block


def verify_important_notification(message: str) -> StepBlock:
    return _verify_in(".govuk-notification-banner--important", "important notification", message)


def verify_warning(warning_text: str) -> StepBlock:
    return _verify_in(".govuk-warning-text", "warning text", warning_text)


def verify_inset_text(text: str) -> StepBlock:
    return _verify_in(".govuk-inset-text", "inset text", text)


def expand_details_and_verify(summary: str, expected_content: str) -> StepBlock:
    async def block(context: JourneyContext) -> None:
        details = context.page.locator("details", has=context.page.locator("summary", has_text=summary))
        if await details.first.get_attribute("open") is None:
            await details.first.locator("summary").click()
        await context.components.wait_for_text(details.first, expected_content, f'details "{summary}"')

    return block


def expand_accordion_and_verify(section_heading: str, expected_content: str) -> StepBlock:
    async def block(context: JourneyContext) -> None:
        await context.components.expand_accordion(section_heading)
        section = context.components.accordion_section(section_heading)
        await context.components.wait_for_text(section, expected_content, f'accordion "{section_heading}"')

    return block


def verify_table_row(row_index: int, expected_cells: Sequence[str], table: Optional[str] = None) -> StepBlock:
    expected_cells = list(expected_cells)
    selector = f"{table or '.govuk-table'} tbody tr"

    async def block(context: JourneyContext) -> None:
        row = context.page.locator(selector).nth(row_index)
        for index, expected in enumerate(expected_cells):
            cell = row.locator("td").nth(index)
            await context.components.wait_for_text(cell, expected, f"table row {row_index} cell {index}")

    return block


async def _click(context: JourneyContext, locator: Locator, name: str, payload: Mapping[str, Any]) -> None:
    try:
        await locator.first.click(timeout=context.runner.config.action_timeout_ms)
    except PlaywrightError as exc:
        raise ToolError(name=name, payload=dict(payload), message=str(exc)) from exc


def file_upload(question: str, file_path: str) -> StepBlock:
    """Answer a file upload question and continue."""

    async def block(context: JourneyContext) -> None:
        await context.runner.verify_heading(question)
        file_input = context.page.locator('input[type="file"]')
        try:
            await file_input.first.set_input_files(file_path, timeout=context.runner.config.action_timeout_ms)
        except PlaywrightError as exc:
            raise ToolError(
                name="file_upload", payload={"question": question, "file": file_path}, message=str(exc)
            ) from exc
        await context.runner.continue_()

    return block


# ---- tabs -----------------------------------------------------------------------

def select_tab(tab_name: str) -> StepBlock:
    async def block(context: JourneyContext) -> None:
        await _click(context, context.page.get_by_role("tab", name=tab_name), "select_tab", {"tab": tab_name})

    return block


def verify_tab_content(content: str) -> StepBlock:
    return _verify_in(ACTIVE_TAB_PANEL, "active tab panel", content)


# ---- pagination and breadcrumbs --------------------------------------------------

def _pagination(context: JourneyContext) -> Locator:
    return context.page.locator(".govuk-pagination")


def next_page() -> StepBlock:
    async def block(context: JourneyContext) -> None:
        link = _pagination(context).get_by_role("link", name=NEXT_LABEL)
        await _click(context, link, "next_page", {})

    return block


def previous_page() -> StepBlock:
    async def block(context: JourneyContext) -> None:
        link = _pagination(context).get_by_role("link", name=PREVIOUS_LABEL)
        await _click(context, link, "previous_page", {})

    return block


def go_to_page(page_number: int) -> StepBlock:
    # Numbered links are labelled "Page 2" for screen readers and show "2".
    name = re.compile(rf"^\s*(page\s+)?{int(page_number)}\s*$", re.IGNORECASE)

    async def block(context: JourneyContext) -> None:
        link = _pagination(context).get_by_role("link", name=name)
        await _click(context, link, "go_to_page", {"page": page_number})

    return block


def click_breadcrumb(link_text: str) -> StepBlock:
    async def block(context: JourneyContext) -> None:
        link = context.page.locator(".govuk-breadcrumbs").get_by_role("link", name=link_text)
        await _click(context, link, "click_breadcrumb", {"link": link_text})

    return block


# ---- banners ---------------------------------------------------------------------

def verify_phase_banner(phase: str, feedback_link: bool = False) -> StepBlock:
    if phase not in PHASES:
        raise ValueError(f"phase must be one of {PHASES}, got {phase!r}")

    async def block(context: JourneyContext) -> None:
        banner = context.page.locator(".govuk-phase-banner")
        tag = banner.locator(".govuk-phase-banner__content__tag")
        await context.components.wait_for_text(tag, phase, "phase banner tag")
        if feedback_link:
            link = banner.get_by_role("link", name=FEEDBACK_LABEL)
            try:
                await link.first.wait_for(state="visible", timeout=context.runner.config.action_timeout_ms)
            except PlaywrightError as exc:
                raise JourneyAssertionError(f"Phase banner has no feedback link: {exc}") from exc

    return block


def _cookie_choice(label: re.Pattern, choice: str) -> StepBlock:
    async def block(context: JourneyContext) -> None:
        cookie_banner = context.page.locator(".govuk-cookie-banner")
        if not await any_visible(cookie_banner):
            logger.debug("No cookie banner shown; nothing to %s", choice)
            return
        button = cookie_banner.get_by_role("button", name=label)
        await _click(context, button, f"{choice}_cookies", {})
        logger.info("Cookies: %s", choice)

    return block


def accept_cookies() -> StepBlock:
    return _cookie_choice(ACCEPT_COOKIES_LABEL, "accept")


def reject_cookies() -> StepBlock:
    return _cookie_choice(REJECT_COOKIES_LABEL, "reject")


# ---- composites ----------------------------------------------------------------------

def complete_form_page(heading: str, fields: Mapping[str, Any]) -> StepBlock:
    fields = dict(fields)

    async def block(context: JourneyContext) -> None:
        await context.runner.verify_heading(heading)
        await context.runner.fill_step(fields)
        await context.runner.continue_()

    return block


def complete_question_page(heading: str, option: str) -> StepBlock:
    return multiple_choice(heading, option)


def verify_confirmation_page(heading: str, reference_label: Optional[str] = None) -> StepBlock:
    """Verify the confirmation heading and panel, and the reference label if given."""

    async def block(context: JourneyContext) -> None:
        await context.runner.verify_heading(heading)
        await context.components.verify_panel_title(heading)
        if reference_label:
            await context.components.wait_for_text(context.components.panel(), reference_label, "confirmation panel")

    return block
