"""Shared run state for the ingestion pipeline: counters, progress and cancellation."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from bizname.domain.model import RunCounts

if TYPE_CHECKING:
    from collections.abc import Callable
    from uuid import UUID

    from bizname.domain.model import RecordKind


class CancellationToken:
    """Thread-safe flag checked by the pipeline between batches."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass(frozen=True, slots=True)
class ProgressSignal:
    run_id: UUID
    kind: RecordKind
    counts: RunCounts


type ProgressCallback = Callable[[ProgressSignal], None]


@dataclass(slots=True)
class RunTally:
    """Cumulative counters updated by the reader and by batch workers."""

    error_log_limit: int = 10
    _processed: int = 0
    _added: int = 0
    _parse_errors: int = 0
    _store_errors: int = 0
    _errors_logged: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def record_read(self) -> int:
        with self._lock:
            self._processed += 1
            return self._processed

    def record_added(self, count: int = 1) -> None:
        with self._lock:
            self._added += count

    def record_parse_error(self) -> bool:
        """Count a parse error; return whether it should still be logged verbosely."""

        with self._lock:
            self._parse_errors += 1
            return self._claim_log_slot()

    def record_store_error(self) -> bool:
        with self._lock:
            self._store_errors += 1
            return self._claim_log_slot()

    def snapshot(self) -> RunCounts:
        with self._lock:
            return RunCounts(
                processed=self._processed,
                added=self._added,
                parse_errors=self._parse_errors,
                store_errors=self._store_errors,
            )

    def _claim_log_slot(self) -> bool:
        if self._errors_logged >= self.error_log_limit:
            return False
        self._errors_logged += 1
        return True
