"""Step blocks that adapt to whichever UI idiom the current page uses.

Each block builds a fresh ``PatternDetector`` over the context's page at run
time, so the same block works against journeys that render errors as a
summary or inline, summaries as a design-system list, ``<dl>`` or table, and
that may or may not offer change-answer links.
"""
from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional, Sequence

from journey_harness.blocks import CHECK_ANSWERS_HEADING, JourneyContext, StepBlock
from journey_harness.errors import JourneyAssertionError
from journey_harness.fields import FieldValue
from journey_harness.patterns import ErrorDisplay, PatternDetector, SummaryListStyle
from journey_harness.runner import CONFIRMATION_HEADING

logger = logging.getLogger(__name__)

SUMMARY_DATA = "summary_data"
JOURNEY_PATTERNS = "journey_patterns"


def _detector(context: JourneyContext) -> PatternDetector:
    return PatternDetector(context.page)


# ---- idiom-agnostic assertions ----------------------------------------------

def verify_errors(expected_errors: Sequence[str]) -> StepBlock:
    expected = list(expected_errors)

    async def block(context: JourneyContext) -> None:
        await _detector(context).verify_errors(expected)

    return block


def verify_summary_data(expected: Mapping[str, str]) -> StepBlock:
    expected = dict(expected)

    async def block(context: JourneyContext) -> None:
        await _detector(context).verify_summary_data(expected)

    return block


def capture_summary_data() -> StepBlock:
    """Store the current page's summary rows on the runner as ``summary_data``."""

    async def block(context: JourneyContext) -> None:
        data = await _detector(context).get_summary_data()
        logger.debug("Captured %d summary rows", len(data))
        context.runner.store_data(SUMMARY_DATA, data)

    return block


def smart_verify_errors(expected_errors: Sequence[str]) -> StepBlock:
    """Like ``verify_errors`` but fails outright when no error idiom is detected."""
    expected = list(expected_errors)

    async def block(context: JourneyContext) -> None:
        await context.page.wait_for_load_state("domcontentloaded")
        detector = _detector(context)
        pattern = await detector.detect_error_display_pattern()
        logger.info("Detected error display pattern: %s", pattern.value)
        if pattern is ErrorDisplay.NONE:
            raise JourneyAssertionError(
                f"No errors displayed on page; expected: {', '.join(expected) or '<any>'}"
            )
        await detector.verify_errors(expected)

    return block


def smart_verify_summary(expected: Mapping[str, str]) -> StepBlock:
    expected = dict(expected)

    async def block(context: JourneyContext) -> None:
        detector = _detector(context)
        pattern = await detector.detect_summary_list_pattern()
        logger.info("Detected summary list pattern: %s", pattern.value)
        if pattern is SummaryListStyle.NONE:
            raise JourneyAssertionError(
                f"No summary list found on page; expected keys: {', '.join(expected)}"
            )
        await detector.verify_summary_data(expected)

    return block


# ---- idiom-agnostic mutations -------------------------------------------------

async def _change_answer(context: JourneyContext, key: str, new_value: FieldValue) -> None:
    await context.runner.click_change(key)
    await context.runner.fill_step({key: new_value})
    await context.runner.continue_()


def change_answer_if_supported(key: str, new_value: FieldValue) -> StepBlock:
    """Change ``key`` from the review page; a logged no-op when unsupported."""

    async def block(context: JourneyContext) -> None:
        if await _detector(context).detect_change_answer_support():
            await _change_answer(context, key, new_value)
        else:
            logger.info('Journey does not support changing answers; skipping change for "%s"', key)

    return block


def conditional_change_answer(
    key: str,
    new_value: FieldValue,
    fallback: Optional[StepBlock] = None,
) -> StepBlock:
    """Change ``key`` when supported, otherwise run ``fallback`` if given."""

    async def block(context: JourneyContext) -> None:
        if await _detector(context).detect_change_answer_support():
            await _change_answer(context, key, new_value)
        elif fallback is not None:
            logger.info('Change not supported for "%s"; running fallback step', key)
            await fallback(context)
        else:
            logger.info('Change not supported for "%s" and no fallback given; skipping', key)

    return block


def go_back() -> StepBlock:
    async def block(context: JourneyContext) -> None:
        await context.runner.go_back()

    return block


def detect_and_log_patterns() -> StepBlock:
    async def block(context: JourneyContext) -> None:
        patterns = await _detector(context).detect_patterns()
        logger.info("Detected journey patterns: %s", patterns.as_dict())
        context.runner.store_data(JOURNEY_PATTERNS, patterns)

    return block


# ---- page-level blocks --------------------------------------------------------

def complete_form_page_with_retry(
    heading: str,
    fields: Mapping[str, FieldValue],
    max_retries: int = 1,
) -> StepBlock:
    """Fill and advance a page, refilling up to ``max_retries`` times on errors.

    Raises ``JourneyAssertionError`` when the errors are still displayed after
    the last retry.
    """
    fields = dict(fields)

    async def block(context: JourneyContext) -> None:
        await context.runner.verify_heading(heading)
        await context.runner.fill_step(fields)
        await context.runner.continue_()

        detector = _detector(context)
        errors = await detector.get_error_messages()
        attempt = 0
        while errors and attempt < max_retries:
            attempt += 1
            logger.warning(
                'Page "%s" rejected the answers (%s); retry %d of %d',
                heading,
                ", ".join(errors),
                attempt,
                max_retries,
            )
            await context.runner.fill_step(fields)
            await context.runner.continue_()
            errors = await detector.get_error_messages()
        if errors:
            raise JourneyAssertionError(
                f'Page "{heading}" still shows errors after {attempt} retries: {", ".join(errors)}'
            )

    return block


def verify_check_answers(
    heading: str = CHECK_ANSWERS_HEADING,
    expected_data: Optional[Mapping[str, str]] = None,
) -> StepBlock:
    async def block(context: JourneyContext) -> None:
        await context.runner.verify_heading(heading)
        if expected_data:
            await _detector(context).verify_summary_data(expected_data)

    return block


def check_answers_and_submit(
    heading: str = CHECK_ANSWERS_HEADING,
    expected_data: Optional[Mapping[str, str]] = None,
) -> StepBlock:
    verify = verify_check_answers(heading, expected_data)

    async def block(context: JourneyContext) -> None:
        await verify(context)
        await context.runner.submit()

    return block


def verify_validation_errors(
    heading: str,
    fields: Mapping[str, FieldValue],
    expected_errors: Sequence[str],
) -> StepBlock:
    """Submit deliberately invalid answers and check the errors shown."""
    fields = dict(fields)
    expected = list(expected_errors)

    async def block(context: JourneyContext) -> None:
        await context.runner.verify_heading(heading)
        await context.runner.fill_step(fields)
        await context.runner.continue_()
        await _detector(context).verify_errors(expected)

    return block


def complete_journey_with_detection(
    journey_path: str,
    steps: Sequence[Mapping[str, Any]],
    check_answers_heading: str = CHECK_ANSWERS_HEADING,
    confirmation_heading: str = CONFIRMATION_HEADING,
) -> List[StepBlock]:
    """Blocks for a whole journey: start, detect idioms, each page, submit, confirm.

    Each entry of ``steps`` is a mapping with ``heading`` and ``fields``.
    """

    async def start(context: JourneyContext) -> None:
        await context.runner.start(journey_path)

    def page_step(heading: str, fields: Mapping[str, FieldValue]) -> StepBlock:
        async def block(context: JourneyContext) -> None:
            await context.runner.verify_heading(heading)
            await context.runner.fill_step(fields)
            await context.runner.continue_()

        return block

    async def confirm(context: JourneyContext) -> None:
        await context.runner.verify_heading(confirmation_heading)

    blocks: List[StepBlock] = [start, detect_and_log_patterns()]
    for step in steps:
        blocks.append(page_step(step["heading"], dict(step["fields"])))
    blocks.append(check_answers_and_submit(check_answers_heading))
    blocks.append(confirm)
    return blocks
