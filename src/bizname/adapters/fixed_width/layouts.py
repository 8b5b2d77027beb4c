"""Versioned fixed-width record layouts for the three extract files.

Offsets are 0-based, end-exclusive character positions. Each layout is plain
immutable data; ``RecordLayout.validate`` checks it against the published
minimum record width before an ingestion run relies on it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from bizname.config.errors import LayoutError
from bizname.domain.model import RecordKind

REQUIRED_FIELDS: Final[frozenset[str]] = frozenset({"document_number", "name"})


@dataclass(frozen=True, slots=True)
class FieldSlice:
    name: str
    start: int
    end: int

    def extract(self, line: str) -> str:
        return line[self.start : self.end].strip()


@dataclass(frozen=True, slots=True)
class RecordLayout:
    kind: RecordKind
    version: str
    min_length: int
    fields: tuple[FieldSlice, ...]

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(field.name for field in self.fields)

    def extract(self, line: str) -> dict[str, str]:
        """Slice ``line`` into trimmed field values keyed by field name."""

        return {field.name: field.extract(line) for field in self.fields}

    def validate(self) -> None:
        """Raise ``LayoutError`` unless every slice is well-formed and disjoint."""

        problems: list[str] = []
        names = self.field_names
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            problems.append(f"duplicate fields {duplicates}")
        missing = sorted(REQUIRED_FIELDS.difference(names))
        if missing:
            problems.append(f"missing required fields {missing}")
        for field in self.fields:
            if field.start < 0 or field.start >= field.end:
                problems.append(f"{field.name} has an empty or inverted range")
            elif field.end > self.min_length:
                problems.append(
                    f"{field.name} ends at {field.end}, past the minimum length {self.min_length}"
                )
        ordered = sorted(self.fields, key=lambda field: field.start)
        for previous, current in zip(ordered, ordered[1:], strict=False):
            if current.start < previous.end:
                problems.append(f"{previous.name} overlaps {current.name}")
        if problems:
            raise LayoutError(
                f"Invalid {self.kind} layout {self.version}: " + "; ".join(problems)
            )


def _address(prefix: str, start: int, widths: tuple[int, int, int, int, int]) -> list[FieldSlice]:
    names = ("line_1", "line_2", "city", "state", "zip")
    slices: list[FieldSlice] = []
    offset = start
    for suffix, width in zip(names, widths, strict=True):
        slices.append(FieldSlice(f"{prefix}_{suffix}", offset, offset + width))
        offset += width
    return slices


ENTITY_LAYOUT: Final[RecordLayout] = RecordLayout(
    kind=RecordKind.ENTITY,
    version="cordata-2024.1",
    min_length=1440,
    fields=(
        FieldSlice("document_number", 0, 12),
        FieldSlice("name", 12, 204),
        FieldSlice("status", 204, 205),
        FieldSlice("filing_type", 205, 220),
        *_address("principal", 220, (42, 42, 28, 2, 10)),
        *_address("mailing", 346, (42, 42, 28, 2, 10)),
        FieldSlice("filing_date", 472, 480),
        FieldSlice("fei_number", 480, 494),
        FieldSlice("last_transaction_date", 495, 503),
        FieldSlice("registered_agent", 544, 586),
    ),
)

FICTITIOUS_NAME_LAYOUT: Final[RecordLayout] = RecordLayout(
    kind=RecordKind.FICTITIOUS_NAME,
    version="ficdata-2024.1",
    min_length=2098,
    fields=(
        FieldSlice("document_number", 0, 12),
        FieldSlice("name", 12, 204),
        FieldSlice("county", 204, 216),
        *_address("principal", 216, (40, 40, 28, 2, 10)),
        FieldSlice("filing_date", 338, 346),
        FieldSlice("status", 351, 352),
        FieldSlice("cancellation_date", 352, 360),
        FieldSlice("expiration_date", 360, 368),
        FieldSlice("number_of_owners", 368, 374),
    ),
)

PARTNERSHIP_LAYOUT: Final[RecordLayout] = RecordLayout(
    kind=RecordKind.PARTNERSHIP,
    version="genfile-2024.1",
    min_length=759,
    fields=(
        FieldSlice("document_number", 0, 12),
        FieldSlice("status", 12, 13),
        FieldSlice("name", 13, 205),
        FieldSlice("filing_date", 205, 213),
        FieldSlice("effective_date", 213, 221),
        FieldSlice("cancellation_date", 221, 229),
        *_address("principal", 240, (44, 44, 28, 2, 10)),
        *_address("mailing", 370, (44, 44, 28, 2, 10)),
        FieldSlice("number_of_partners", 746, 751),
        FieldSlice("expiration_date", 751, 759),
    ),
)

LAYOUTS: Final[dict[RecordKind, RecordLayout]] = {
    layout.kind: layout for layout in (ENTITY_LAYOUT, FICTITIOUS_NAME_LAYOUT, PARTNERSHIP_LAYOUT)
}


def layout_for(kind: RecordKind) -> RecordLayout:
    return LAYOUTS[kind]
