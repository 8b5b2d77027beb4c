"""Sync-run ledger entries for ingestion executions."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from uuid import UUID, uuid4

from .enums import RecordKind, RunType, SyncStatus

CANCELLED_REASON = "cancelled"


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class RunCounts:
    """Snapshot of cumulative counters for one run."""

    processed: int = 0
    added: int = 0
    parse_errors: int = 0
    store_errors: int = 0

    @property
    def errors(self) -> int:
        return self.parse_errors + self.store_errors


@dataclass(eq=False, kw_only=True)
class SyncRun:
    """One execution of the ingestion pipeline against one source file."""

    kind: RecordKind
    run_type: RunType = RunType.FULL
    source_path: str | None = None
    layout_version: str | None = None
    id: UUID = field(default_factory=uuid4)
    status: SyncStatus = SyncStatus.IN_PROGRESS
    processed: int = 0
    added: int = 0
    parse_errors: int = 0
    store_errors: int = 0
    started_at: datetime = field(default_factory=_utcnow)
    completed_at: datetime | None = None
    error_message: str | None = None

    @property
    def errors(self) -> int:
        return self.parse_errors + self.store_errors

    @property
    def counts(self) -> RunCounts:
        return RunCounts(
            processed=self.processed,
            added=self.added,
            parse_errors=self.parse_errors,
            store_errors=self.store_errors,
        )

    @property
    def is_finished(self) -> bool:
        return self.status is not SyncStatus.IN_PROGRESS

    @property
    def was_cancelled(self) -> bool:
        return self.status is SyncStatus.FAILED and self.error_message == CANCELLED_REASON

    def record_counts(self, counts: RunCounts) -> None:
        self.processed = counts.processed
        self.added = counts.added
        self.parse_errors = counts.parse_errors
        self.store_errors = counts.store_errors

    def complete(self, counts: RunCounts, *, at: datetime | None = None) -> None:
        self._require_in_progress()
        self.record_counts(counts)
        self.status = SyncStatus.COMPLETED
        self.completed_at = at or _utcnow()

    def fail(self, message: str, counts: RunCounts, *, at: datetime | None = None) -> None:
        self._require_in_progress()
        self.record_counts(counts)
        self.status = SyncStatus.FAILED
        self.error_message = message
        self.completed_at = at or _utcnow()

    def is_stalled(self, *, now: datetime | None = None, threshold: timedelta) -> bool:
        """Whether the run is still in progress long after it started."""

        if self.is_finished:
            return False
        reference = now or _utcnow()
        return reference - self.started_at > threshold

    def _require_in_progress(self) -> None:
        if self.is_finished:
            raise ValueError(f"Sync run {self.id} already finished with status {self.status}")
