"""Field resolution for ``JourneyRunner.fill_step``.

A logical field label plus a value is resolved once into one of a closed set
of variants (text, radio option, checkbox options, composite date) by
inspecting the page, then applied. Exception-driven trial and error is only
used as a logged last resort.
"""
from __future__ import annotations

import calendar
import logging
import re
from dataclasses import dataclass
from datetime import date
from typing import Any, List, Mapping, Optional, Sequence, Union

from playwright.async_api import Locator, Page

from journey_harness.config import RunnerConfig
from journey_harness.dom import first_visible, safe_count
from journey_harness.errors import ToolError
from journey_harness.text import has_quotes, quote_tolerant_pattern

logger = logging.getLogger(__name__)

FieldValue = Union[str, int, bool, Sequence[str], Mapping[str, Any], date]

_DATE_LABEL = re.compile(r"\bdate\b|\bdob\b", re.IGNORECASE)
_DATE_SEPARATORS = re.compile(r"[\s/.\-]+")
_FALSY = {"", "false", "no", "off", "0"}
_NUMERIC = re.compile(r"[0-9]+")
_MONTH_NUMBERS = {
    name.lower(): str(number)
    for names in (calendar.month_name, calendar.month_abbr)
    for number, name in enumerate(names)
    if name
}


def is_date_field(label: str) -> bool:
    return bool(_DATE_LABEL.search(label))


def _truthy(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in _FALSY
    return bool(value)


@dataclass(frozen=True)
class DateParts:
    day: str
    month: str
    year: str

    @classmethod
    def parse(cls, value: Any) -> "DateParts":
        """Accept ``{"day", "month", "year"}``, a ``date`` or ``"DD/MM/YYYY"``.

        Strings may be delimited by slashes, dashes, dots or whitespace. Day
        and year must be numeric; the month may also be an English month
        name ("14 February 2021"). Anything else raises ``ValueError``.
        """
        if isinstance(value, date):
            return cls(str(value.day), str(value.month), str(value.year))
        if isinstance(value, Mapping):
            try:
                return cls(*(str(value[part]).strip() for part in ("day", "month", "year")))
            except KeyError as exc:
                raise ValueError(f"Date mapping is missing {exc.args[0]!r}: {dict(value)!r}") from None
        if isinstance(value, str):
            parts = [part for part in _DATE_SEPARATORS.split(value.strip()) if part]
            if len(parts) == 3:
                day, month, year = parts
                month = _MONTH_NUMBERS.get(month.lower(), month)
                if all(_NUMERIC.fullmatch(part) for part in (day, month, year)):
                    return cls(day, month, year)
        raise ValueError(f"Cannot interpret {value!r} as a day/month/year date")

    def combined(self) -> str:
        return f"{self.day}/{self.month}/{self.year}"


# ---- resolved variants -----------------------------------------------------

@dataclass
class TextField:
    label: str
    locator: Locator
    value: str

    async def apply(self) -> None:
        tag = await self.locator.evaluate("el => el.tagName.toLowerCase()")
        if tag == "select":
            await self.locator.select_option(label=self.value)
        else:
            await self.locator.fill(self.value)


@dataclass
class RadioOption:
    label: str
    locator: Locator

    async def apply(self) -> None:
        await self.locator.check()


@dataclass
class CheckboxOption:
    label: str
    locators: List[Locator]
    checked: bool = True

    async def apply(self) -> None:
        for locator in self.locators:
            if self.checked:
                await locator.check()
            else:
                await locator.uncheck()


@dataclass
class CompositeDate:
    label: str
    parts: DateParts
    day: Optional[Locator] = None
    month: Optional[Locator] = None
    year: Optional[Locator] = None
    combined: Optional[Locator] = None

    @property
    def has_distinct_inputs(self) -> bool:
        return self.day is not None and self.month is not None and self.year is not None

    async def apply(self) -> None:
        if self.has_distinct_inputs:
            await self.day.fill(self.parts.day)
            await self.month.fill(self.parts.month)
            await self.year.fill(self.parts.year)
        elif self.combined is not None:
            await self.combined.fill(self.parts.combined())
        else:
            raise ToolError(
                name="fill_date",
                payload={"field": self.label, "value": self.parts.combined()},
                message="No day/month/year inputs and no combined date input found",
            )


ResolvedField = Union[TextField, RadioOption, CheckboxOption, CompositeDate]


class FieldResolver:
    """Turn a logical field label and value into a ``ResolvedField``."""

    def __init__(self, page: Page, config: Optional[RunnerConfig] = None) -> None:
        self._page = page
        self._config = config or RunnerConfig()

    async def resolve(self, label: str, value: FieldValue) -> ResolvedField:
        if isinstance(value, (list, tuple, set, frozenset)):
            return await self._checkbox_group(label, [str(option) for option in value])

        if isinstance(value, (Mapping, date)):
            try:
                parts = DateParts.parse(value)
            except ValueError as exc:
                raise ToolError(
                    name="fill_step",
                    payload={"field": label, "value": value},
                    message=f'Cannot fill "{label}" as a date: {exc}',
                ) from exc
            return await self._composite_date(label, parts)
        if is_date_field(label):
            try:
                parts = DateParts.parse(value)
            except ValueError:
                logger.debug("Field %r looks like a date but %r is not; treating as text", label, value)
            else:
                return await self._composite_date(label, parts)

        control = await self._control(label, value)
        kind = (await control.get_attribute("type") or "").lower()
        if kind == "radio":
            return RadioOption(label, control)
        if kind == "checkbox":
            return CheckboxOption(label, [control], checked=_truthy(value))
        return TextField(label, control, "" if value is None else str(value))

    # ---- lookups ----------------------------------------------------------
    # Labels and legends may be written with typographic quotes on the page
    # and straight quotes by the caller, or the other way round.
    @staticmethod
    def _by_label(scope: Union[Page, Locator], label: str, exact: bool = True) -> Locator:
        if has_quotes(label):
            return scope.get_by_label(quote_tolerant_pattern(label, exact=exact))
        return scope.get_by_label(label, exact=exact)

    @staticmethod
    def _by_role(scope: Union[Page, Locator], role: str, name: str) -> Locator:
        if has_quotes(name):
            return scope.get_by_role(role, name=quote_tolerant_pattern(name, exact=True))
        return scope.get_by_role(role, name=name, exact=True)

    async def _fieldset(self, legend: str) -> Optional[Locator]:
        has_text = quote_tolerant_pattern(legend) if has_quotes(legend) else legend
        group = self._page.locator("fieldset").filter(
            has=self._page.locator("legend").filter(has_text=has_text)
        )
        if await safe_count(group):
            return group.first
        return None

    async def _option_in(self, scope: Union[Page, Locator], option: str) -> Optional[Locator]:
        candidates = (
            self._by_label(scope, option),
            self._by_role(scope, "radio", option),
            self._by_role(scope, "checkbox", option),
        )
        for candidate in candidates:
            if await safe_count(candidate):
                return candidate.first
        return None

    async def _control(self, label: str, value: FieldValue) -> Locator:
        exact = self._by_label(self._page, label)
        exact_count = await safe_count(exact)
        if exact_count == 1:
            return exact

        # Label missing or ambiguous: role-based lookups.
        if ": " in label:
            legend, option = label.rsplit(": ", 1)
            group = await self._fieldset(legend)
            if group is not None:
                found = await self._option_in(group, option)
                if found is not None:
                    return found

        if isinstance(value, str) and value:
            group = await self._fieldset(label)
            if group is not None:
                found = await self._option_in(group, value)
                if found is not None:
                    return found

        textbox = self._by_role(self._page, "textbox", label)
        if await safe_count(textbox) == 1:
            return textbox

        if exact_count > 1:
            visible = await first_visible(exact)
            if visible is not None:
                logger.warning("Label %r matched %d controls; using the first visible one", label, exact_count)
                return visible

        loose = self._by_label(self._page, label, exact=False)
        if await safe_count(loose):
            logger.warning("No exact control for %r; falling back to a partial label match", label)
            return (await first_visible(loose)) or loose.first

        raise ToolError(
            name="fill_step",
            payload={"field": label, "value": value},
            message=f'No control found for field "{label}"',
        )

    async def _checkbox_group(self, label: str, options: List[str]) -> CheckboxOption:
        scope: Union[Page, Locator] = await self._fieldset(label) or self._page
        locators: List[Locator] = []
        for option in options:
            found = await self._option_in(scope, option)
            if found is None and scope is not self._page:
                found = await self._option_in(self._page, option)
            if found is None:
                raise ToolError(
                    name="fill_step",
                    payload={"field": label, "option": option},
                    message=f'No checkbox "{option}" found for field "{label}"',
                )
            locators.append(found)
        return CheckboxOption(label, locators)

    async def _composite_date(self, label: str, parts: DateParts) -> CompositeDate:
        group = await self._fieldset(label)
        scopes: List[Union[Page, Locator]] = [group] if group is not None else []
        scopes.append(self._page)

        for scope in scopes:
            day = scope.locator('input[id$="-day"]')
            month = scope.locator('input[id$="-month"]')
            year = scope.locator('input[id$="-year"]')
            if await safe_count(day) and await safe_count(month) and await safe_count(year):
                if scope is self._page and await safe_count(day) > 1:
                    logger.warning("Several date controls on page; filling the first for %r", label)
                return CompositeDate(label, parts, day=day.first, month=month.first, year=year.first)

        combined = self._by_label(self._page, label)
        if not await safe_count(combined):
            combined = self._by_label(self._page, label, exact=False)
        if await safe_count(combined):
            logger.debug("No distinct day/month/year inputs for %r; using a combined entry", label)
            return CompositeDate(label, parts, combined=combined.first)
        return CompositeDate(label, parts)
