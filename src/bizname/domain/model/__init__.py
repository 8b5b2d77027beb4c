"""Public domain model surface."""

from __future__ import annotations

from bizname.domain.model.enums import ParseErrorReason, RecordKind, RunType, SyncStatus
from bizname.domain.model.records import (
    BusinessRecord,
    EntityRecord,
    FictitiousNameRecord,
    ParsedRecord,
    ParseError,
    PartnershipRecord,
    RawRecordLine,
    StoredRecord,
    is_active_status,
    status_label,
)
from bizname.domain.model.sync_run import CANCELLED_REASON, RunCounts, SyncRun

__all__ = [  # noqa: RUF022
    # enums
    "ParseErrorReason",
    "RecordKind",
    "RunType",
    "SyncStatus",
    # records
    "BusinessRecord",
    "EntityRecord",
    "FictitiousNameRecord",
    "ParsedRecord",
    "ParseError",
    "PartnershipRecord",
    "RawRecordLine",
    "StoredRecord",
    "is_active_status",
    "status_label",
    # ledger
    "CANCELLED_REASON",
    "RunCounts",
    "SyncRun",
]
