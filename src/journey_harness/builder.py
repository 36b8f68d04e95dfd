"""Fluent composition of step blocks into an executable journey.

Example::

    await (
        JourneyBuilder(page, runner, components)
        .add_step(blocks.start_journey("/register-an-aircraft"))
        .add_step(blocks.select_individual_applicant())
        .add_step(blocks.fill_contact_details())
        .add_step(blocks.check_your_answers_and_submit())
        .add_step(blocks.verify_confirmation())
        .execute()
    )
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from playwright.async_api import Page

from journey_harness.adaptive import JOURNEY_PATTERNS, SUMMARY_DATA
from journey_harness.blocks import (
    ADDRESS_DATA,
    AIRCRAFT_DATA,
    COMPANY_DATA,
    CONTACT_DATA,
    REFERENCE_NUMBER,
    JourneyContext,
    StepBlock,
    select_individual_applicant,
    select_organisation_applicant,
    start_journey,
)
from journey_harness.components import ComponentHelper
from journey_harness.errors import JourneyStepError
from journey_harness.runner import JourneyRunner

logger = logging.getLogger(__name__)

# Runner-held keys copied into the builder's shared data after every step.
SYNCED_KEYS = (
    CONTACT_DATA,
    COMPANY_DATA,
    ADDRESS_DATA,
    AIRCRAFT_DATA,
    REFERENCE_NUMBER,
    SUMMARY_DATA,
    JOURNEY_PATTERNS,
)


class JourneyBuilder:
    """Ordered list of step blocks run against one shared context.

    Not re-entrant: calling ``execute()`` while a run on the same builder is in
    progress raises ``RuntimeError``.
    """

    def __init__(
        self,
        page: Page,
        runner: JourneyRunner,
        components: ComponentHelper,
        initial_data: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self._steps: List[StepBlock] = []
        self._shared_data: Dict[str, Any] = dict(initial_data or {})
        self._context = JourneyContext(page=page, runner=runner, components=components, data=self._shared_data)
        self._executed = 0
        self._running = False

    @property
    def context(self) -> JourneyContext:
        return self._context

    # ---- composition --------------------------------------------------------
    def add_step(self, step: StepBlock) -> "JourneyBuilder":
        self._steps.append(step)
        return self

    def add_steps(self, steps: Iterable[StepBlock]) -> "JourneyBuilder":
        self._steps.extend(steps)
        return self

    def add_custom_step(self, step: StepBlock) -> "JourneyBuilder":
        """Append an ad-hoc async callable taking the ``JourneyContext``."""
        return self.add_step(step)

    def clear(self) -> "JourneyBuilder":
        self._steps = []
        return self

    def step_count(self) -> int:
        return len(self._steps)

    def executed_count(self) -> int:
        """Steps completed by the most recent run."""
        return self._executed

    # ---- shared data --------------------------------------------------------
    def set_data(self, key: str, value: Any) -> "JourneyBuilder":
        self._shared_data[key] = value
        self._context.data = self._shared_data
        return self

    def get_data(self, key: str, default: Any = None) -> Any:
        return self._shared_data.get(key, default)

    def reset_data(self) -> "JourneyBuilder":
        self._shared_data = {}
        self._context.data = self._shared_data
        return self

    # ---- execution ----------------------------------------------------------
    async def execute(self) -> None:
        """Run every queued step in order, stopping at the first failure.

        Raises:
            JourneyStepError: a step raised; ``step_number`` is 1-based.
            RuntimeError: the builder is already executing.
        """
        if self._running:
            raise RuntimeError("JourneyBuilder.execute() is already running on this builder")
        self._running = True
        self._executed = 0
        try:
            for index, step in enumerate(list(self._steps)):
                self._context.data = self._shared_data
                try:
                    await step(self._context)
                except Exception as exc:
                    logger.error("Journey failed at step %d: %s", index + 1, exc)
                    raise JourneyStepError(index + 1, exc) from exc
                self._sync_from_runner()
                self._executed = index + 1
        finally:
            self._running = False

    async def execute_up_to(self, step_index: int) -> None:
        """Run steps ``0..step_index`` inclusive."""
        await self._execute_slice(0, step_index + 1)

    async def execute_range(self, start_index: int, end_index: int) -> None:
        """Run steps ``start_index..end_index`` inclusive."""
        await self._execute_slice(start_index, end_index + 1)

    async def _execute_slice(self, start: int, stop: int) -> None:
        original = self._steps
        self._steps = original[start:stop]
        try:
            await self.execute()
        finally:
            self._steps = original

    def _sync_from_runner(self) -> None:
        runner = self._context.runner
        for key in SYNCED_KEYS:
            value = runner.get_data(key)
            if value is not None:
                self._shared_data[key] = value

    def clone(self) -> "JourneyBuilder":
        """Builder over the same page and runner with its own steps and data."""
        cloned = JourneyBuilder(
            self._context.page,
            self._context.runner,
            self._context.components,
            dict(self._shared_data),
        )
        cloned._steps = list(self._steps)
        return cloned


# ---- templates -------------------------------------------------------------------

def _started(page: Page, runner: JourneyRunner, components: ComponentHelper, journey_path: str) -> JourneyBuilder:
    return JourneyBuilder(page, runner, components).add_step(start_journey(journey_path))


def individual_application(
    page: Page, runner: JourneyRunner, components: ComponentHelper, journey_path: str
) -> JourneyBuilder:
    """Started journey with the individual applicant type already chosen."""
    return _started(page, runner, components, journey_path).add_step(select_individual_applicant())


def organisation_application(
    page: Page, runner: JourneyRunner, components: ComponentHelper, journey_path: str
) -> JourneyBuilder:
    return _started(page, runner, components, journey_path).add_step(select_organisation_applicant())


def multi_page_form(
    page: Page, runner: JourneyRunner, components: ComponentHelper, journey_path: str
) -> JourneyBuilder:
    return _started(page, runner, components, journey_path)
