"""Record-kind descriptors wiring the fixed-width parser into the pipeline."""

from __future__ import annotations

from functools import partial
from typing import Final

from bizname.domain.ingest_pipeline import RecordKindDescriptor
from bizname.domain.model import RecordKind

from .layouts import LAYOUTS
from .parser import parse

SOURCE_FILE_PATTERNS: Final[dict[RecordKind, str]] = {
    RecordKind.ENTITY: "cordata*.txt",
    RecordKind.FICTITIOUS_NAME: "ficdata*.txt",
    RecordKind.PARTNERSHIP: "genfile*.txt",
}


def descriptor_for(kind: RecordKind) -> RecordKindDescriptor:
    layout = LAYOUTS[kind]
    return RecordKindDescriptor(
        kind=kind,
        layout_version=layout.version,
        validate_layout=layout.validate,
        parse=partial(parse, kind),
        file_pattern=SOURCE_FILE_PATTERNS[kind],
    )


DESCRIPTORS: Final[dict[RecordKind, RecordKindDescriptor]] = {
    kind: descriptor_for(kind) for kind in RecordKind
}
