"""Runtime detection of the UI idioms a journey page uses.

Journeys produced by the form generator do not agree on how they show errors,
render the check-your-answers summary or offer back navigation. The detector
classifies the *currently rendered* page so that step blocks can assert
without knowing which idiom is in play.

Detection never mutates the page and never raises for a missing element:
absence is a valid classification. Only the ``verify_*`` methods raise.
"""
from __future__ import annotations

import logging
import re
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Dict, List, Mapping, Sequence

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from journey_harness.dom import any_visible, safe_count
from journey_harness.errors import JourneyAssertionError
from journey_harness.text import SMART_QUOTES, collapse_whitespace, normalize_for_match

logger = logging.getLogger(__name__)

ERROR_SUMMARY_SELECTOR = ".govuk-error-summary"
INLINE_ERROR_SELECTOR = '.govuk-error-message, p:has-text("Error:")'
DESIGN_SYSTEM_LIST_SELECTOR = ".govuk-summary-list"
CHANGE_CONTROL_SELECTOR = 'a:has-text("Change"), button:has-text("Change")'

_ERROR_PREFIX = re.compile(r"^\s*Error:\s*", re.IGNORECASE)
BACK_LABEL = re.compile(r"^\s*back\s*$", re.IGNORECASE)


class ErrorDisplay(str, Enum):
    SUMMARY = "summary"
    INLINE = "inline"
    BOTH = "both"
    NONE = "none"


class SummaryListStyle(str, Enum):
    DESIGN_SYSTEM = "govuk-summary-list"
    DEFINITION_LIST = "dl"
    TABLE = "table"
    NONE = "none"


class BackNavigation(str, Enum):
    BUTTON = "button"
    LINK = "link"
    BOTH = "both"
    NONE = "none"


@dataclass(frozen=True)
class JourneyPatterns:
    """Idioms detected on one page. Computed fresh on every call."""

    error_display: ErrorDisplay
    summary_list: SummaryListStyle
    change_answers: bool
    back_navigation: BackNavigation
    smart_quotes: bool

    def as_dict(self) -> Dict[str, object]:
        return {
            key: value.value if isinstance(value, Enum) else value
            for key, value in asdict(self).items()
        }


def _combine(first: bool, second: bool, both, only_first, only_second, neither):
    if first and second:
        return both
    if first:
        return only_first
    if second:
        return only_second
    return neither


def _dedupe(messages: Sequence[str]) -> List[str]:
    seen = set()
    unique: List[str] = []
    for message in messages:
        if message not in seen:
            seen.add(message)
            unique.append(message)
    return unique


class PatternDetector:
    """Classify the current page into known idioms per category."""

    def __init__(self, page: Page) -> None:
        self._page = page

    async def detect_patterns(self) -> JourneyPatterns:
        return JourneyPatterns(
            error_display=await self.detect_error_display_pattern(),
            summary_list=await self.detect_summary_list_pattern(),
            change_answers=await self.detect_change_answer_support(),
            back_navigation=await self.detect_back_navigation_pattern(),
            smart_quotes=await self.detect_smart_quotes(),
        )

    # ---- classification ---------------------------------------------------
    async def detect_error_display_pattern(self) -> ErrorDisplay:
        has_summary = await any_visible(self._page.locator(ERROR_SUMMARY_SELECTOR))
        has_inline = await any_visible(self._page.locator(INLINE_ERROR_SELECTOR))
        return _combine(
            has_summary,
            has_inline,
            ErrorDisplay.BOTH,
            ErrorDisplay.SUMMARY,
            ErrorDisplay.INLINE,
            ErrorDisplay.NONE,
        )

    async def detect_summary_list_pattern(self) -> SummaryListStyle:
        # Priority order matters: a design-system list is itself a <dl>.
        candidates = (
            (DESIGN_SYSTEM_LIST_SELECTOR, SummaryListStyle.DESIGN_SYSTEM),
            ("dl", SummaryListStyle.DEFINITION_LIST),
            ("table", SummaryListStyle.TABLE),
        )
        for selector, style in candidates:
            if await any_visible(self._page.locator(selector)):
                return style
        return SummaryListStyle.NONE

    async def detect_change_answer_support(self) -> bool:
        return await safe_count(self._page.locator(CHANGE_CONTROL_SELECTOR)) > 0

    async def detect_back_navigation_pattern(self) -> BackNavigation:
        has_button = await any_visible(self._page.get_by_role("button", name=BACK_LABEL))
        has_link = await any_visible(self._page.get_by_role("link", name=BACK_LABEL))
        return _combine(
            has_button,
            has_link,
            BackNavigation.BOTH,
            BackNavigation.BUTTON,
            BackNavigation.LINK,
            BackNavigation.NONE,
        )

    async def detect_smart_quotes(self) -> bool:
        try:
            content = await self._page.content()
        except PlaywrightError as exc:
            logger.debug("Could not read page content: %s", exc)
            return False
        return bool(SMART_QUOTES.search(content))

    # ---- summary extraction -----------------------------------------------
    async def get_summary_data(self) -> Dict[str, str]:
        style = await self.detect_summary_list_pattern()
        if style is SummaryListStyle.DESIGN_SYSTEM:
            return await self._design_system_summary()
        if style is SummaryListStyle.DEFINITION_LIST:
            return await self._definition_list_summary()
        if style is SummaryListStyle.TABLE:
            return await self._table_summary()
        return {}

    async def _design_system_summary(self) -> Dict[str, str]:
        data: Dict[str, str] = {}
        for row in await self._page.locator(".govuk-summary-list__row").all():
            key_cell = row.locator(".govuk-summary-list__key")
            value_cell = row.locator(".govuk-summary-list__value")
            if not await key_cell.count() or not await value_cell.count():
                continue
            key = collapse_whitespace(await key_cell.first.text_content())
            value = collapse_whitespace(await value_cell.first.text_content())
            if key:
                data[key] = value
        return data

    async def _definition_list_summary(self) -> Dict[str, str]:
        data: Dict[str, str] = {}
        for term in await self._page.locator("dl dt").all():
            definition = term.locator("xpath=following-sibling::dd[1]")
            if not await definition.count():
                continue
            key = collapse_whitespace(await term.text_content())
            if key:
                data[key] = collapse_whitespace(await definition.text_content())
        return data

    async def _table_summary(self) -> Dict[str, str]:
        data: Dict[str, str] = {}
        for row in await self._page.locator("table tr").all():
            cells = await row.locator("th, td").all()
            if len(cells) < 2:
                continue
            key = collapse_whitespace(await cells[0].text_content())
            if key:
                data[key] = collapse_whitespace(await cells[1].text_content())
        return data

    # ---- error extraction -------------------------------------------------
    async def get_error_messages(self) -> List[str]:
        pattern = await self.detect_error_display_pattern()
        if pattern is ErrorDisplay.SUMMARY:
            return await self._error_summary_messages()
        if pattern is ErrorDisplay.INLINE:
            return await self._inline_error_messages()
        if pattern is ErrorDisplay.BOTH:
            return _dedupe(
                await self._error_summary_messages() + await self._inline_error_messages()
            )
        return []

    async def _error_summary_messages(self) -> List[str]:
        summary = self._page.locator(ERROR_SUMMARY_SELECTOR)
        if not await any_visible(summary):
            return []
        messages: List[str] = []
        for item in await summary.locator("li").all():
            text = collapse_whitespace(await item.text_content())
            if text:
                messages.append(text)
        if not messages:
            for link in await summary.locator("a").all():
                text = collapse_whitespace(await link.text_content())
                if text:
                    messages.append(text)
        return _dedupe(messages)

    async def _inline_error_messages(self) -> List[str]:
        messages: List[str] = []
        for element in await self._page.locator(INLINE_ERROR_SELECTOR).all():
            if not await element.is_visible():
                continue
            text = _ERROR_PREFIX.sub("", collapse_whitespace(await element.text_content()))
            if text:
                messages.append(text)
        return _dedupe(messages)

    # ---- verification -----------------------------------------------------
    async def verify_summary_data(self, expected: Mapping[str, str]) -> None:
        """Assert every expected key is present with the expected value.

        Extra rows on the page are ignored.
        """
        actual = await self.get_summary_data()
        by_normalized_key = {normalize_for_match(key): value for key, value in actual.items()}

        for key, expected_value in expected.items():
            if key in actual:
                actual_value = actual[key]
            elif normalize_for_match(key) in by_normalized_key:
                actual_value = by_normalized_key[normalize_for_match(key)]
            else:
                available = ", ".join(actual) or "<none>"
                raise JourneyAssertionError(
                    f'Summary key "{key}" not found. Available keys: {available}'
                )
            if collapse_whitespace(actual_value) != collapse_whitespace(expected_value):
                raise JourneyAssertionError(
                    f'Summary value mismatch for "{key}": expected "{expected_value}", '
                    f'got "{actual_value}"'
                )

    async def verify_errors(self, expected: Sequence[str]) -> None:
        """Assert each expected text is a case-insensitive substring of an error."""
        actual = await self.get_error_messages()
        lowered = [message.lower() for message in actual]
        for message in expected:
            needle = message.lower()
            if not any(needle in candidate for candidate in lowered):
                shown = ", ".join(actual) or "<none>"
                raise JourneyAssertionError(
                    f'Expected error "{message}" not found. Actual errors: {shown}'
                )
