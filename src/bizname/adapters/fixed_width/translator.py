"""Translate validated fixed-width rows into domain records."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from bizname.domain.model import EntityRecord, FictitiousNameRecord, PartnershipRecord

from .schema import EntityRow, FictitiousNameRow, PartnershipRow

if TYPE_CHECKING:
    from collections.abc import Iterable

    from bizname.domain.model import ParsedRecord

    from .schema import FixedWidthRow


ADDRESS_SEPARATOR: Final[str] = ", "

FILING_TYPE_LABELS: Final[dict[str, str]] = {
    "DOMP": "Corporation",
    "DOMNP": "Nonprofit Corporation",
    "FORP": "Foreign Corporation",
    "FORNP": "Foreign Nonprofit",
    "DOMLP": "Limited Partnership",
    "FORLP": "Foreign LP",
    "FLAL": "LLC",
    "FORL": "Foreign LLC",
    "NPREG": "Nonprofit Registration",
    "TRUST": "Business Trust",
    "AGENT": "Registered Agent",
}


def entity_type_label(filing_type: str | None) -> str | None:
    """Map a filing-type code to its label; unknown codes pass through unchanged."""

    if filing_type is None:
        return None
    return FILING_TYPE_LABELS.get(filing_type.upper(), filing_type)


def join_address(parts: Iterable[str | None]) -> str | None:
    present = [part for part in parts if part]
    return ADDRESS_SEPARATOR.join(present) or None


def translate_row(row: FixedWidthRow) -> ParsedRecord:
    match row:
        case EntityRow():
            return _entity(row)
        case FictitiousNameRow():
            return _fictitious_name(row)
        case PartnershipRow():
            return _partnership(row)
        case _:
            raise TypeError(f"Unsupported row model {type(row).__name__}")


def _entity(row: EntityRow) -> EntityRecord:
    return EntityRecord(
        document_number=row.document_number,
        name=row.name,
        status=row.status,
        filing_date=row.filing_date,
        principal_address=join_address(row.principal_parts()),
        mailing_address=join_address(row.mailing_parts()),
        filing_type=row.filing_type,
        entity_type=entity_type_label(row.filing_type),
        registered_agent=row.registered_agent,
        fei_number=row.fei_number,
        last_transaction_date=row.last_transaction_date,
    )


def _fictitious_name(row: FictitiousNameRow) -> FictitiousNameRecord:
    return FictitiousNameRecord(
        document_number=row.document_number,
        name=row.name,
        status=row.status,
        filing_date=row.filing_date,
        principal_address=join_address(row.principal_parts()),
        mailing_address=join_address(row.mailing_parts()),
        county=row.county,
        cancellation_date=row.cancellation_date,
        expiration_date=row.expiration_date,
        number_of_owners=row.number_of_owners,
    )


def _partnership(row: PartnershipRow) -> PartnershipRecord:
    return PartnershipRecord(
        document_number=row.document_number,
        name=row.name,
        status=row.status,
        filing_date=row.filing_date,
        principal_address=join_address(row.principal_parts()),
        mailing_address=join_address(row.mailing_parts()),
        effective_date=row.effective_date,
        cancellation_date=row.cancellation_date,
        expiration_date=row.expiration_date,
        number_of_partners=row.number_of_partners,
    )
