"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class RecordKind(StrEnum):
    """Category of government filing, each with its own fixed-width layout."""

    ENTITY = "entity"
    FICTITIOUS_NAME = "fictitious_name"
    PARTNERSHIP = "partnership"


class RunType(StrEnum):
    FULL = "full"
    INCREMENTAL = "incremental"


class SyncStatus(StrEnum):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


class ParseErrorReason(StrEnum):
    TOO_SHORT = "too_short"
    MISSING_DOCUMENT_NUMBER = "missing_document_number"
    INVALID_FIELD = "invalid_field"
