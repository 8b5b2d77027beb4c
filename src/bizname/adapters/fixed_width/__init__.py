"""Public interface for the fixed-width extract adapter."""

from __future__ import annotations

from .descriptors import DESCRIPTORS, SOURCE_FILE_PATTERNS, descriptor_for
from .layouts import (
    ENTITY_LAYOUT,
    FICTITIOUS_NAME_LAYOUT,
    LAYOUTS,
    PARTNERSHIP_LAYOUT,
    FieldSlice,
    RecordLayout,
    layout_for,
)
from .parser import parse
from .translator import FILING_TYPE_LABELS, entity_type_label, join_address

__all__ = [
    "DESCRIPTORS",
    "ENTITY_LAYOUT",
    "FICTITIOUS_NAME_LAYOUT",
    "FILING_TYPE_LABELS",
    "LAYOUTS",
    "PARTNERSHIP_LAYOUT",
    "SOURCE_FILE_PATTERNS",
    "FieldSlice",
    "RecordLayout",
    "descriptor_for",
    "entity_type_label",
    "join_address",
    "layout_for",
    "parse",
]
