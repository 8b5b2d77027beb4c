"""Parsed and stored business records.

Parsed records are immutable values produced by the fixed-width parser. A
``StoredRecord`` wraps one with the derived normalized name and the time it was
last written, which is exactly what the record store persists and returns.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar, Final

from .enums import ParseErrorReason, RecordKind

if TYPE_CHECKING:
    from datetime import date, datetime


ACTIVE_STATUS_CODE: Final[str] = "A"

_STATUS_LABELS: Final[dict[RecordKind, dict[str, str]]] = {
    RecordKind.ENTITY: {"A": "ACTIVE", "I": "INACTIVE"},
    RecordKind.FICTITIOUS_NAME: {"A": "ACTIVE", "E": "EXPIRED", "C": "CANCELLED"},
    RecordKind.PARTNERSHIP: {"A": "ACTIVE", "I": "INACTIVE", "E": "EXPIRED", "C": "CANCELLED"},
}
_FALLBACK_STATUS_LABELS: Final[dict[RecordKind, str]] = {
    RecordKind.ENTITY: "INACTIVE",
    RecordKind.FICTITIOUS_NAME: "CANCELLED",
    RecordKind.PARTNERSHIP: "UNKNOWN",
}


def status_label(kind: RecordKind, code: str) -> str:
    """Human-readable label for a one-letter status code of ``kind``."""

    return _STATUS_LABELS[kind].get(code.upper(), _FALLBACK_STATUS_LABELS[kind])


def is_active_status(code: str) -> bool:
    return code.upper() == ACTIVE_STATUS_CODE


@dataclass(frozen=True, slots=True)
class RawRecordLine:
    """One line of a source extract, tagged with its kind and 1-based line number."""

    kind: RecordKind
    text: str
    line_number: int


@dataclass(frozen=True, slots=True, kw_only=True)
class BusinessRecord:
    """Fields shared by every record kind."""

    KIND: ClassVar[RecordKind]

    document_number: str
    name: str
    status: str
    filing_date: date | None = None
    principal_address: str | None = None
    mailing_address: str | None = None

    @property
    def kind(self) -> RecordKind:
        return self.KIND

    @property
    def relevant_date(self) -> date | None:
        """Date used to rank search matches."""
        return self.filing_date

    @property
    def status_label(self) -> str:
        return status_label(self.KIND, self.status)

    @property
    def is_active(self) -> bool:
        return is_active_status(self.status)


@dataclass(frozen=True, slots=True, kw_only=True)
class EntityRecord(BusinessRecord):
    KIND: ClassVar[RecordKind] = RecordKind.ENTITY

    filing_type: str | None = None
    entity_type: str | None = None
    registered_agent: str | None = None
    fei_number: str | None = None
    last_transaction_date: date | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class FictitiousNameRecord(BusinessRecord):
    KIND: ClassVar[RecordKind] = RecordKind.FICTITIOUS_NAME

    county: str | None = None
    cancellation_date: date | None = None
    expiration_date: date | None = None
    number_of_owners: int = 0


@dataclass(frozen=True, slots=True, kw_only=True)
class PartnershipRecord(BusinessRecord):
    KIND: ClassVar[RecordKind] = RecordKind.PARTNERSHIP

    effective_date: date | None = None
    cancellation_date: date | None = None
    expiration_date: date | None = None
    number_of_partners: int = 0

    @property
    def relevant_date(self) -> date | None:
        return self.filing_date or self.effective_date


type ParsedRecord = EntityRecord | FictitiousNameRecord | PartnershipRecord


@dataclass(frozen=True, slots=True)
class ParseError:
    """A line that could not be turned into a record; returned, never raised."""

    reason: ParseErrorReason
    kind: RecordKind
    line_number: int | None = None
    detail: str | None = None

    def describe(self) -> str:
        location = f"line {self.line_number}" if self.line_number is not None else "line ?"
        message = f"{self.kind} {location}: {self.reason}"
        if self.detail:
            message = f"{message} ({self.detail})"
        return message


@dataclass(frozen=True, slots=True)
class StoredRecord[TRecord: BusinessRecord]:
    record: TRecord
    normalized_name: str
    last_updated: datetime

    @property
    def document_number(self) -> str:
        return self.record.document_number

    @property
    def kind(self) -> RecordKind:
        return self.record.kind
