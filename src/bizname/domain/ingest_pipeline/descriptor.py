"""Record-kind descriptors: everything kind-specific the pipeline needs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Callable

    from bizname.domain.model import ParsedRecord, ParseError, RecordKind


class RecordParser(Protocol):
    def __call__(self, line: str, line_number: int | None = None) -> ParsedRecord | ParseError: ...


@dataclass(frozen=True, slots=True)
class RecordKindDescriptor:
    """Strategy object parameterizing the generic ingestion pipeline.

    ``validate_layout`` raises when the kind's field layout is unusable; it runs
    before a sync run is created. ``file_pattern`` is the glob matching this
    kind's extract files inside a download directory.
    """

    kind: RecordKind
    layout_version: str
    validate_layout: Callable[[], None]
    parse: RecordParser
    file_pattern: str
