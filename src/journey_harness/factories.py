"""Factories for generated applicant data used by journey runs."""
from __future__ import annotations

import secrets
import time
from dataclasses import dataclass
from typing import Optional

FIRST_NAMES = ["John", "Jane", "Alice", "Bob", "Charlie", "Diana", "Edward", "Fiona"]
LAST_NAMES = ["Smith", "Jones", "Williams", "Brown", "Taylor", "Davies", "Wilson", "Evans"]

# Real, always-valid postcodes so server-side postcode validation passes.
VALID_POSTCODES = [
    "B1 1AA",
    "M1 1AA",
    "LS1 1AA",
    "L1 1AA",
    "S1 1AA",
    "CF10 1AA",
    "G1 1AA",
    "EH1 1AA",
    "BT1 1AA",
    "BS1 1AA",
]

STREETS = ["High Street", "Station Road", "Church Lane", "Main Street", "Park Avenue"]
CITIES = ["London", "Manchester", "Birmingham", "Leeds", "Liverpool"]
COMPANY_WORDS = ["Aviation", "Aerospace", "Flight", "Airways", "Air Services"]
COMPANY_TYPES = ["Ltd", "PLC", "LLP"]
MANUFACTURERS = ["Cessna", "Piper", "Beechcraft", "Cirrus", "Diamond"]
MODELS = ["172", "182", "PA-28", "SR22", "DA40"]


@dataclass
class PersonName:
    first_name: str
    last_name: str

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@dataclass
class ContactDetails:
    full_name: str
    email: str
    phone: str


@dataclass
class Address:
    line1: str
    city: str
    postcode: str
    line2: str = ""
    county: str = ""


@dataclass
class CompanyDetails:
    name: str
    registration_number: str
    address: str = ""


@dataclass
class AircraftDetails:
    manufacturer: str
    model: str
    serial_number: str


def generate_email(prefix: str = "test") -> str:
    return f"{prefix}.{int(time.time() * 1000)}{secrets.token_hex(2)}@example.com"


def generate_phone_number() -> str:
    return f"077{secrets.randbelow(100_000_000):08d}"


def generate_postcode() -> str:
    return secrets.choice(VALID_POSTCODES)


def generate_name() -> PersonName:
    return PersonName(secrets.choice(FIRST_NAMES), secrets.choice(LAST_NAMES))


def generate_contact_details(name: Optional[PersonName] = None) -> ContactDetails:
    name = name or generate_name()
    return ContactDetails(
        full_name=name.full_name,
        email=generate_email(name.first_name.lower()),
        phone=generate_phone_number(),
    )


def generate_address() -> Address:
    return Address(
        line1=f"{secrets.randbelow(200) + 1} {secrets.choice(STREETS)}",
        city=secrets.choice(CITIES),
        postcode=generate_postcode(),
    )


def generate_company_details() -> CompanyDetails:
    address = generate_address()
    return CompanyDetails(
        name=f"{secrets.choice(COMPANY_WORDS)} {secrets.choice(COMPANY_TYPES)}",
        registration_number=f"{secrets.randbelow(10_000_000):08d}",
        address=f"{address.line1}, {address.city}, {address.postcode}",
    )


def generate_aircraft_details() -> AircraftDetails:
    return AircraftDetails(
        manufacturer=secrets.choice(MANUFACTURERS),
        model=secrets.choice(MODELS),
        serial_number=f"SN{str(int(time.time() * 1000))[-8:]}",
    )
