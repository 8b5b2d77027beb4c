"""Generic streaming ingestion pipeline.

One ``IngestionPipeline`` serves every record kind; the ``RecordKindDescriptor``
supplies the parser and layout metadata and the unit of work supplies the
target store. Lines are read on the calling thread and handed to a bounded
thread pool in batches. At most ``workers`` batches are in flight, so reading
never runs ahead of what the store can absorb.
"""

from __future__ import annotations

from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from datetime import UTC, datetime
from itertools import islice
from logging import getLogger
from typing import TYPE_CHECKING

from bizname.domain.model import (
    CANCELLED_REASON,
    ParseError,
    RunType,
    StoredRecord,
    SyncRun,
)
from bizname.domain.normalization import DEFAULT_RULES, NamingRules, normalize
from bizname.domain.ports.persistence import StoreError
from bizname.domain.ports.sources import SourceReadError

from .context import CancellationToken, ProgressSignal, RunTally

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator

    from bizname.domain.model import BusinessRecord, RawRecordLine
    from bizname.domain.ports import LineSource, RecordUnitOfWork

    from .context import ProgressCallback
    from .descriptor import RecordKindDescriptor


log = getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True)
class IngestionPipeline:
    descriptor: RecordKindDescriptor
    unit_of_work_factory: Callable[[], RecordUnitOfWork]
    rules: NamingRules = DEFAULT_RULES
    workers: int = 4
    batch_size: int = 500
    progress_every: int = 1000
    error_log_limit: int = 10
    clock: Callable[[], datetime] = _utcnow

    def __post_init__(self) -> None:
        if min(self.workers, self.batch_size, self.progress_every) < 1:
            raise ValueError("workers, batch_size and progress_every must be positive")

    def run(
        self,
        source: LineSource,
        *,
        run_type: RunType = RunType.FULL,
        cancel: CancellationToken | None = None,
        progress: ProgressCallback | None = None,
    ) -> SyncRun:
        """Ingest ``source`` and return its finished sync run.

        Parse and store failures are counted on the run. A source read failure
        or cancellation finishes the run as failed. Any other exception marks
        the run failed and is re-raised.
        """

        self.descriptor.validate_layout()
        run = SyncRun(
            kind=self.descriptor.kind,
            run_type=run_type,
            source_path=source.description,
            layout_version=self.descriptor.layout_version,
            started_at=self.clock(),
        )
        self._save_run(run)
        log.info(
            "Started %s %s import %s from %s", run_type, run.kind, run.id, run.source_path
        )

        token = cancel or CancellationToken()
        tally = RunTally(error_log_limit=self.error_log_limit)
        try:
            self._ingest(run, source, tally, token, progress)
        except SourceReadError as exc:
            log.error("Source read failed for run %s: %s", run.id, exc)
            run.fail(str(exc), tally.snapshot(), at=self.clock())
        except BaseException as exc:
            log.exception("Import run %s aborted", run.id)
            run.fail(str(exc) or type(exc).__name__, tally.snapshot(), at=self.clock())
            self._save_run(run)
            raise
        else:
            if token.cancelled:
                log.warning("Import run %s cancelled", run.id)
                run.fail(CANCELLED_REASON, tally.snapshot(), at=self.clock())
            else:
                run.complete(tally.snapshot(), at=self.clock())

        self._save_run(run)
        log.info(
            "Finished import %s as %s: processed=%d added=%d parse_errors=%d store_errors=%d",
            run.id,
            run.status,
            run.processed,
            run.added,
            run.parse_errors,
            run.store_errors,
        )
        return run

    def _ingest(
        self,
        run: SyncRun,
        source: Iterable[RawRecordLine],
        tally: RunTally,
        token: CancellationToken,
        progress: ProgressCallback | None,
    ) -> None:
        workers = self.workers
        lines = self._counted(run, source, tally, progress)
        with ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix=f"ingest-{run.kind}"
        ) as executor:
            in_flight: set[Future[None]] = set()
            try:
                while not token.cancelled:
                    batch = list(islice(lines, self.batch_size))
                    if not batch:
                        break
                    if len(in_flight) >= workers:
                        done, in_flight = wait(in_flight, return_when=FIRST_COMPLETED)
                        _raise_worker_failures(done)
                    in_flight.add(executor.submit(self._process_batch, batch, tally))
            finally:
                done, _ = wait(in_flight)
            _raise_worker_failures(done)

    def _counted(
        self,
        run: SyncRun,
        source: Iterable[RawRecordLine],
        tally: RunTally,
        progress: ProgressCallback | None,
    ) -> Iterator[RawRecordLine]:
        every = self.progress_every
        for line in source:
            processed = tally.record_read()
            yield line
            if processed % every == 0:
                self._emit_progress(run, tally, progress)

    def _emit_progress(
        self, run: SyncRun, tally: RunTally, progress: ProgressCallback | None
    ) -> None:
        counts = tally.snapshot()
        log.info(
            "%s import %s progress: processed=%d added=%d errors=%d",
            run.kind,
            run.id,
            counts.processed,
            counts.added,
            counts.errors,
        )
        if progress is not None:
            progress(ProgressSignal(run_id=run.id, kind=run.kind, counts=counts))

    def _process_batch(self, batch: list[RawRecordLine], tally: RunTally) -> None:
        stored: list[StoredRecord[BusinessRecord]] = []
        for line in batch:
            result = self.descriptor.parse(line.text, line.line_number)
            if isinstance(result, ParseError):
                if tally.record_parse_error():
                    log.warning("Skipping unparseable record: %s", result.describe())
                continue
            stored.append(
                StoredRecord(
                    record=result,
                    normalized_name=normalize(result.name, self.rules),
                    last_updated=self.clock(),
                )
            )
        if not stored:
            return

        try:
            self._upsert(stored)
        except StoreError as exc:
            log.debug("Batch upsert of %d records failed (%s); retrying singly", len(stored), exc)
            for item in stored:
                self._upsert_single(item, tally)
        else:
            tally.record_added(len(stored))

    def _upsert_single(self, item: StoredRecord[BusinessRecord], tally: RunTally) -> None:
        try:
            self._upsert([item])
        except StoreError as exc:
            if tally.record_store_error():
                log.warning(
                    "Failed to store %s %s: %s", item.kind, item.document_number, exc
                )
        else:
            tally.record_added()

    def _upsert(self, items: list[StoredRecord[BusinessRecord]]) -> None:
        with self.unit_of_work_factory() as uow:
            repository = uow.repositories.for_kind(self.descriptor.kind)
            for item in items:
                repository.upsert(item)
            uow.commit()

    def _save_run(self, run: SyncRun) -> None:
        with self.unit_of_work_factory() as uow:
            uow.repositories.sync_runs.add(run)
            uow.commit()


def _raise_worker_failures(done: Iterable[Future[None]]) -> None:
    for future in done:
        future.result()
