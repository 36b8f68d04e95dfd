"""Reusable journey step blocks.

A step block is an async callable taking the ``JourneyContext`` of the run.
The factories below capture their parameters (expected heading, field values)
in a closure and return the block; ``JourneyBuilder`` runs them in order.

Blocks that generate data store it on the runner under the well-known keys so
later blocks, and the builder's shared data, can read it back.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Sequence, Type, TypeVar

from playwright.async_api import Page

from journey_harness.components import ComponentHelper
from journey_harness.factories import (
    AircraftDetails,
    Address,
    CompanyDetails,
    ContactDetails,
    generate_address,
    generate_aircraft_details,
    generate_company_details,
    generate_contact_details,
)
from journey_harness.fields import FieldValue
from journey_harness.runner import CONFIRMATION_HEADING, JourneyRunner
from journey_harness.text import collapse_whitespace

logger = logging.getLogger(__name__)

CONTACT_DATA = "contact_data"
COMPANY_DATA = "company_data"
ADDRESS_DATA = "address_data"
AIRCRAFT_DATA = "aircraft_data"
REFERENCE_NUMBER = "reference_number"

APPLICANT_HEADING = "Who is registering the aircraft?"
CHECK_ANSWERS_HEADING = "Check your answers before submitting"


@dataclass
class JourneyContext:
    """State threaded through one journey run."""

    page: Page
    runner: JourneyRunner
    components: ComponentHelper
    data: Dict[str, Any] = field(default_factory=dict)


StepBlock = Callable[[JourneyContext], Awaitable[None]]

T = TypeVar("T")


def _record(value: Any, cls: Type[T]) -> T:
    if isinstance(value, cls):
        return value
    if isinstance(value, Mapping):
        return cls(**value)
    raise TypeError(f"Expected {cls.__name__} or mapping, got {type(value).__name__}")


def _preset(context: JourneyContext, key: str, cls: Type[T], factory: Callable[[], T]) -> T:
    value = context.data.get(key) if context.data else None
    return factory() if value is None else _record(value, cls)


# ---- applicant type ----------------------------------------------------------

def select_applicant_type(option: str, heading_text: Optional[str] = None) -> StepBlock:
    async def block(context: JourneyContext) -> None:
        if heading_text:
            await context.runner.verify_heading(heading_text)
        await context.runner.select_radio(option)
        await context.runner.continue_()

    return block


def select_individual_applicant(heading_text: str = APPLICANT_HEADING) -> StepBlock:
    return select_applicant_type("An individual", heading_text)


def select_organisation_applicant(heading_text: str = APPLICANT_HEADING) -> StepBlock:
    return select_applicant_type("A company or organisation", heading_text)


# ---- contact, company, address, aircraft ---------------------------------------

def _contact_fields(contact: ContactDetails) -> Dict[str, FieldValue]:
    return {
        "Full name": contact.full_name,
        "Email address": contact.email,
        "Telephone number": contact.phone,
    }


def fill_contact_details(heading_text: str = "Your contact details") -> StepBlock:
    """Fill contact details from shared data, generating them if absent."""

    async def block(context: JourneyContext) -> None:
        await context.runner.verify_heading(heading_text)
        contact = _preset(context, CONTACT_DATA, ContactDetails, generate_contact_details)
        await context.runner.fill_step(_contact_fields(contact))
        await context.runner.continue_()
        context.runner.store_data(CONTACT_DATA, contact)

    return block


def fill_contact_details_with_data(
    contact: ContactDetails | Mapping[str, str],
    heading_text: Optional[str] = None,
) -> StepBlock:
    contact = _record(contact, ContactDetails)

    async def block(context: JourneyContext) -> None:
        if heading_text:
            await context.runner.verify_heading(heading_text)
        await context.runner.fill_step(_contact_fields(contact))
        await context.runner.continue_()
        context.runner.store_data(CONTACT_DATA, contact)

    return block


def fill_company_name(heading_text: str = "What is the company name?") -> StepBlock:
    async def block(context: JourneyContext) -> None:
        await context.runner.verify_heading(heading_text)
        company = _preset(context, COMPANY_DATA, CompanyDetails, generate_company_details)
        await context.runner.fill_step({"Company name": company.name})
        await context.runner.continue_()
        context.runner.store_data(COMPANY_DATA, company)

    return block


def fill_company_registration(heading_text: str = "Company registration details") -> StepBlock:
    async def block(context: JourneyContext) -> None:
        await context.runner.verify_heading(heading_text)
        company = _preset(context, COMPANY_DATA, CompanyDetails, generate_company_details)
        await context.runner.fill_step({
            "Company registration number": company.registration_number,
            "Registered office address": company.address,
        })
        await context.runner.continue_()
        context.runner.store_data(COMPANY_DATA, company)

    return block


def fill_uk_address(heading_text: str = "What is your address?") -> StepBlock:
    async def block(context: JourneyContext) -> None:
        await context.runner.verify_heading(heading_text)
        address = _preset(context, ADDRESS_DATA, Address, generate_address)
        fields: Dict[str, FieldValue] = {"Address line 1": address.line1}
        # Optional lines.
        if address.line2:
            fields["Address line 2"] = address.line2
        fields["Town or city"] = address.city
        if address.county:
            fields["County"] = address.county
        fields["Postcode"] = address.postcode
        await context.runner.fill_step(fields)
        await context.runner.continue_()
        context.runner.store_data(ADDRESS_DATA, address)

    return block


def fill_aircraft_details(heading_text: str = "Enter aircraft details") -> StepBlock:
    async def block(context: JourneyContext) -> None:
        await context.runner.verify_heading(heading_text)
        aircraft = _preset(context, AIRCRAFT_DATA, AircraftDetails, generate_aircraft_details)
        await context.runner.fill_step({
            "Manufacturer": aircraft.manufacturer,
            "Model": aircraft.model,
            "Serial number": aircraft.serial_number,
        })
        await context.runner.continue_()
        context.runner.store_data(AIRCRAFT_DATA, aircraft)

    return block


# ---- documents and declarations -------------------------------------------------

def upload_document(field_label: str, file_path: str) -> StepBlock:
    async def block(context: JourneyContext) -> None:
        await context.page.get_by_label(field_label).set_input_files(file_path)

    return block


def accept_declaration(label: str = "I confirm that the information provided is correct") -> StepBlock:
    return check_checkbox(label)


def accept_terms_and_conditions(label: str = "I accept the terms and conditions") -> StepBlock:
    return check_checkbox(label)


# ---- review and confirmation ----------------------------------------------------

def check_your_answers_and_submit(heading_text: str = CHECK_ANSWERS_HEADING) -> StepBlock:
    """Verify the review page, cross-check stored contact details, submit."""

    async def block(context: JourneyContext) -> None:
        await context.runner.verify_heading(heading_text)
        contact = context.runner.get_data(CONTACT_DATA)
        if contact is not None:
            contact = _record(contact, ContactDetails)
            await context.components.verify_summary_row("Full name", contact.full_name)
            await context.components.verify_summary_row("Email address", contact.email)
        await context.runner.submit()

    return block


def verify_check_your_answers(heading_text: str = CHECK_ANSWERS_HEADING) -> StepBlock:
    return verify_heading(heading_text)


def change_answer(key: str) -> StepBlock:
    async def block(context: JourneyContext) -> None:
        await context.runner.click_change(key)

    return block


def verify_confirmation(heading_text: str = CONFIRMATION_HEADING) -> StepBlock:
    async def block(context: JourneyContext) -> None:
        await context.runner.verify_heading(heading_text)
        await context.components.verify_panel_title(heading_text)

    return block


def verify_confirmation_with_reference(heading_text: str = CONFIRMATION_HEADING) -> StepBlock:
    """Verify the confirmation panel and store its reference number."""

    async def block(context: JourneyContext) -> None:
        await context.runner.verify_heading(heading_text)
        await context.components.verify_panel_title(heading_text)
        reference = await context.runner.get_reference_number()
        if reference is None:
            body = context.page.locator(".govuk-panel__body")
            reference = collapse_whitespace(await body.first.text_content()) if await body.count() else None
        logger.info("Confirmation reference: %s", reference)
        context.runner.store_data(REFERENCE_NUMBER, reference)

    return block


# ---- navigation -----------------------------------------------------------------

def start_journey(path: str) -> StepBlock:
    async def block(context: JourneyContext) -> None:
        await context.runner.start(path)

    return block


def go_back() -> StepBlock:
    async def block(context: JourneyContext) -> None:
        await context.runner.go_back()

    return block


def continue_step() -> StepBlock:
    async def block(context: JourneyContext) -> None:
        await context.runner.continue_()

    return block


# ---- generic form blocks --------------------------------------------------------

def fill_form_step(data: Mapping[str, FieldValue], heading_text: Optional[str] = None) -> StepBlock:
    data = dict(data)

    async def block(context: JourneyContext) -> None:
        if heading_text:
            await context.runner.verify_heading(heading_text)
        await context.runner.fill_step(data)
        await context.runner.continue_()

    return block


def select_radio(label: str, heading_text: Optional[str] = None) -> StepBlock:
    return select_applicant_type(label, heading_text)


def check_checkbox(label: str) -> StepBlock:
    async def block(context: JourneyContext) -> None:
        await context.runner.check_checkbox(label)

    return block


# ---- verification ---------------------------------------------------------------

def verify_heading(heading_text: str) -> StepBlock:
    async def block(context: JourneyContext) -> None:
        await context.runner.verify_heading(heading_text)

    return block


def verify_error_summary(expected_errors: Sequence[str]) -> StepBlock:
    expected = list(expected_errors)

    async def block(context: JourneyContext) -> None:
        await context.components.verify_error_summary(expected)

    return block


def verify_field_error(field_id: str, message: str) -> StepBlock:
    async def block(context: JourneyContext) -> None:
        await context.components.verify_field_error(field_id, message)

    return block


# ---- composites -----------------------------------------------------------------

def complete_individual_application(
    applicant_heading: str = APPLICANT_HEADING,
    contact_heading: str = "Your contact details",
    check_answers_heading: str = CHECK_ANSWERS_HEADING,
    confirmation_heading: str = CONFIRMATION_HEADING,
) -> List[StepBlock]:
    """Applicant type, contact details, check answers, confirmation."""
    return [
        select_individual_applicant(applicant_heading),
        fill_contact_details(contact_heading),
        check_your_answers_and_submit(check_answers_heading),
        verify_confirmation(confirmation_heading),
    ]


def complete_organisation_application(
    applicant_heading: str = APPLICANT_HEADING,
    contact_heading: str = "Your contact details",
    check_answers_heading: str = CHECK_ANSWERS_HEADING,
    confirmation_heading: str = CONFIRMATION_HEADING,
) -> List[StepBlock]:
    return [
        select_organisation_applicant(applicant_heading),
        fill_contact_details(contact_heading),
        check_your_answers_and_submit(check_answers_heading),
        verify_confirmation(confirmation_heading),
    ]
