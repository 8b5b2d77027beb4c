"""Positional parsing of fixed-width extract lines.

``parse`` never raises for bad input: short lines, blank document numbers and
rows failing schema validation come back as ``ParseError`` values so the
ingestion pipeline can count them and move on.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from pydantic import ValidationError

from bizname.domain.model import ParseError, ParseErrorReason, RecordKind

from .layouts import layout_for
from .schema import EntityRow, FictitiousNameRow, FixedWidthRow, PartnershipRow
from .translator import translate_row

if TYPE_CHECKING:
    from bizname.domain.model import ParsedRecord

ROW_MODELS: Final[dict[RecordKind, type[FixedWidthRow]]] = {
    RecordKind.ENTITY: EntityRow,
    RecordKind.FICTITIOUS_NAME: FictitiousNameRow,
    RecordKind.PARTNERSHIP: PartnershipRow,
}


def parse(kind: RecordKind, line: str, line_number: int | None = None) -> ParsedRecord | ParseError:
    layout = layout_for(kind)
    if len(line) < layout.min_length:
        return ParseError(
            reason=ParseErrorReason.TOO_SHORT,
            kind=kind,
            line_number=line_number,
            detail=f"{len(line)} < {layout.min_length} characters",
        )

    values = layout.extract(line)
    if not values["document_number"]:
        return ParseError(
            reason=ParseErrorReason.MISSING_DOCUMENT_NUMBER, kind=kind, line_number=line_number
        )

    try:
        row = ROW_MODELS[kind].model_validate(values)
    except ValidationError as exc:
        return ParseError(
            reason=ParseErrorReason.INVALID_FIELD,
            kind=kind,
            line_number=line_number,
            detail=_summarize(exc),
        )
    return translate_row(row)


def _summarize(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
    )
