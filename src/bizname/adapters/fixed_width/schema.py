"""Pydantic models describing one sliced fixed-width row per record kind."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, ConfigDict, Field, field_validator

_ADDRESS_FIELDS = (
    "principal_line_1",
    "principal_line_2",
    "principal_city",
    "principal_state",
    "principal_zip",
    "mailing_line_1",
    "mailing_line_2",
    "mailing_city",
    "mailing_state",
    "mailing_zip",
)


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _parse_yyyymmdd(value: object) -> object:
    """Blank, all-zero and impossible dates become ``None``; they are routine placeholders."""

    if not isinstance(value, str):
        return value
    stripped = value.strip()
    if len(stripped) != 8 or not stripped.isdigit() or not stripped.strip("0"):
        return None
    try:
        return date(int(stripped[:4]), int(stripped[4:6]), int(stripped[6:]))
    except ValueError:
        return None


def _parse_count(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return int(stripped) if stripped.isdigit() else 0
    return value


class FixedWidthRow(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True, str_strip_whitespace=True)

    document_number: str = Field(min_length=1)
    name: str = Field(min_length=1)
    status: str = Field(default="", max_length=1)

    principal_line_1: str | None = None
    principal_line_2: str | None = None
    principal_city: str | None = None
    principal_state: str | None = None
    principal_zip: str | None = None
    mailing_line_1: str | None = None
    mailing_line_2: str | None = None
    mailing_city: str | None = None
    mailing_state: str | None = None
    mailing_zip: str | None = None

    filing_date: date | None = None

    @field_validator("status", mode="before")
    @classmethod
    def _upper_status(cls, value: object) -> object:
        return value.strip().upper() if isinstance(value, str) else value

    def principal_parts(self) -> tuple[str | None, ...]:
        return (
            self.principal_line_1,
            self.principal_line_2,
            self.principal_city,
            self.principal_state,
            self.principal_zip,
        )

    def mailing_parts(self) -> tuple[str | None, ...]:
        return (
            self.mailing_line_1,
            self.mailing_line_2,
            self.mailing_city,
            self.mailing_state,
            self.mailing_zip,
        )


class EntityRow(FixedWidthRow):
    filing_type: str | None = None
    fei_number: str | None = None
    registered_agent: str | None = None
    last_transaction_date: date | None = None

    _normalize_text = field_validator(
        "filing_type", "fei_number", "registered_agent", *_ADDRESS_FIELDS, mode="before"
    )(_blank_to_none)
    _normalize_dates = field_validator("filing_date", "last_transaction_date", mode="before")(
        _parse_yyyymmdd
    )


class FictitiousNameRow(FixedWidthRow):
    county: str | None = None
    cancellation_date: date | None = None
    expiration_date: date | None = None
    number_of_owners: int = 0

    _normalize_text = field_validator(
        "county", *_ADDRESS_FIELDS, mode="before"
    )(_blank_to_none)
    _normalize_dates = field_validator(
        "filing_date", "cancellation_date", "expiration_date", mode="before"
    )(_parse_yyyymmdd)
    _normalize_count = field_validator("number_of_owners", mode="before")(_parse_count)


class PartnershipRow(FixedWidthRow):
    effective_date: date | None = None
    cancellation_date: date | None = None
    expiration_date: date | None = None
    number_of_partners: int = 0

    _normalize_text = field_validator(*_ADDRESS_FIELDS, mode="before")(_blank_to_none)
    _normalize_dates = field_validator(
        "filing_date",
        "effective_date",
        "cancellation_date",
        "expiration_date",
        mode="before",
    )(_parse_yyyymmdd)
    _normalize_count = field_validator("number_of_partners", mode="before")(_parse_count)
