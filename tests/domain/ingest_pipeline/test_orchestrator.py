from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest

from bizname.config import LayoutError
from bizname.domain.ingest_pipeline import (
    CancellationToken,
    IngestionPipeline,
    RecordKindDescriptor,
)
from bizname.domain.model import RecordKind, RunType, SyncStatus
from tests.helpers.fakes import FakeStore, ListSource, pipe_parse

if TYPE_CHECKING:
    from bizname.domain.ingest_pipeline import ProgressSignal, RecordParser
    from bizname.domain.model import ParseError

FIXED_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def _descriptor(
    parse: RecordParser = pipe_parse, *, layout_error: str | None = None
) -> RecordKindDescriptor:
    def validate_layout() -> None:
        if layout_error is not None:
            raise LayoutError(layout_error)

    return RecordKindDescriptor(
        kind=RecordKind.ENTITY,
        layout_version="pipe-1",
        validate_layout=validate_layout,
        parse=parse,
        file_pattern="*.txt",
    )


def _pipeline(
    store: FakeStore,
    *,
    descriptor: RecordKindDescriptor | None = None,
    workers: int = 2,
    batch_size: int = 2,
    progress_every: int = 1000,
    error_log_limit: int = 10,
) -> IngestionPipeline:
    return IngestionPipeline(
        descriptor=descriptor or _descriptor(),
        unit_of_work_factory=store.factory,
        workers=workers,
        batch_size=batch_size,
        progress_every=progress_every,
        error_log_limit=error_log_limit,
        clock=lambda: FIXED_NOW,
    )


def _source(*lines: str) -> ListSource:
    return ListSource(kind=RecordKind.ENTITY, lines=list(lines))


def test_pipeline_stores_normalized_records_and_completes_run() -> None:
    store = FakeStore()
    source = _source(
        "E1|Sunshine Consulting LLC|A|2023-01-15",
        "E2|The Blue Door, Inc.|I",
        "E3|Smith & Sons|A",
    )

    run = _pipeline(store).run(source, run_type=RunType.INCREMENTAL)

    assert run.status is SyncStatus.COMPLETED
    assert run.run_type is RunType.INCREMENTAL
    assert run.processed == 3
    assert run.added == 3
    assert run.errors == 0
    assert run.layout_version == "pipe-1"
    assert run.source_path == "memory://test"
    assert run.started_at == FIXED_NOW
    assert run.completed_at == FIXED_NOW
    stored = store.entities.records
    assert {key: item.normalized_name for key, item in stored.items()} == {
        "E1": "SUNSHINE CONSULTING",
        "E2": "BLUE DOOR",
        "E3": "SMITH AND SON",
    }
    assert stored["E1"].last_updated == FIXED_NOW
    assert store.sync_runs.runs[run.id] is run
    assert store.sync_runs.saves[0] == (run.id, "in_progress")
    assert store.sync_runs.saves[-1] == (run.id, "completed")


def test_reingesting_the_same_source_upserts_in_place() -> None:
    store = FakeStore()
    pipeline = _pipeline(store)
    lines = ("E1|Sunshine Consulting LLC|A", "E2|Blue Door|A")

    first = pipeline.run(_source(*lines))
    second = pipeline.run(_source("E1|Sunshine Consulting LLC|I", lines[1]))

    assert first.added == second.added == 2
    assert store.entities.count() == 2
    assert store.entities.records["E1"].record.status == "I"
    assert len(store.sync_runs.runs) == 2


def test_parse_errors_are_counted_and_skipped() -> None:
    store = FakeStore()
    source = _source("E1|Acme|A", "garbage", "|No Document|A", "E2|Blue Door|A")

    run = _pipeline(store).run(source)

    assert run.status is SyncStatus.COMPLETED
    assert run.processed == 4
    assert run.added == 2
    assert run.parse_errors == 2
    assert set(store.entities.records) == {"E1", "E2"}


def test_failed_batch_is_retried_record_by_record() -> None:
    store = FakeStore()
    store.entities.fail_on.add("E2")
    source = _source("E1|Acme|A", "E2|Broken|A", "E3|Blue Door|A")

    run = _pipeline(store, batch_size=3).run(source)

    assert run.status is SyncStatus.COMPLETED
    assert run.added == 2
    assert run.store_errors == 1
    assert set(store.entities.records) == {"E1", "E3"}


def test_source_read_failure_fails_the_run() -> None:
    store = FakeStore()
    source = ListSource(
        kind=RecordKind.ENTITY,
        lines=[f"E{index}|Name {index}|A" for index in range(1, 6)],
        fail_after=3,
    )

    run = _pipeline(store, workers=1).run(source)

    assert run.status is SyncStatus.FAILED
    assert run.error_message == "disk vanished at line 4"
    assert run.processed == 3
    assert run.added == 2
    assert store.sync_runs.saves[-1] == (run.id, "failed")


def test_pre_cancelled_token_stops_before_reading() -> None:
    store = FakeStore()
    token = CancellationToken()
    token.cancel()

    run = _pipeline(store).run(_source("E1|Acme|A"), cancel=token)

    assert run.status is SyncStatus.FAILED
    assert run.was_cancelled
    assert run.processed == 0
    assert store.entities.count() == 0


def test_cancellation_is_checked_between_batches() -> None:
    store = FakeStore()
    token = CancellationToken()
    lines = [f"E{index}|Name {index}|A" for index in range(1, 6)]

    def cancel_on_first_signal(signal: ProgressSignal) -> None:
        _ = signal
        token.cancel()

    run = _pipeline(store, workers=1, batch_size=1, progress_every=1).run(
        _source(*lines), cancel=token, progress=cancel_on_first_signal
    )

    assert run.was_cancelled
    assert run.processed == 2
    assert run.added == 2
    assert store.entities.count() == 2


def test_progress_is_reported_every_n_lines() -> None:
    store = FakeStore()
    signals: list[ProgressSignal] = []
    lines = [f"E{index}|Name {index}|A" for index in range(1, 6)]

    run = _pipeline(store, batch_size=500, progress_every=2).run(
        _source(*lines), progress=signals.append
    )

    assert [signal.counts.processed for signal in signals] == [2, 4]
    assert all(signal.run_id == run.id for signal in signals)
    assert all(signal.kind is RecordKind.ENTITY for signal in signals)


def test_verbose_error_logging_is_capped(caplog: pytest.LogCaptureFixture) -> None:
    store = FakeStore()
    caplog.set_level(logging.WARNING, logger="bizname.domain.ingest_pipeline.orchestrator")

    run = _pipeline(store, error_log_limit=2).run(_source(*["bad"] * 5))

    assert run.parse_errors == 5
    skipped = [record for record in caplog.records if "unparseable" in record.getMessage()]
    assert len(skipped) == 2


def test_invalid_layout_aborts_before_a_run_is_recorded() -> None:
    store = FakeStore()
    pipeline = _pipeline(store, descriptor=_descriptor(layout_error="name overlaps status"))

    with pytest.raises(LayoutError, match="overlaps"):
        pipeline.run(_source("E1|Acme|A"))

    assert store.sync_runs.runs == {}


def test_unexpected_worker_failure_marks_run_failed_and_propagates() -> None:
    store = FakeStore()

    def exploding_parse(line: str, line_number: int | None = None) -> ParseError:
        _ = line
        raise RuntimeError(f"boom at {line_number}")

    pipeline = _pipeline(store, descriptor=_descriptor(exploding_parse))

    with pytest.raises(RuntimeError, match="boom at 1"):
        pipeline.run(_source("E1|Acme|A"))

    (run,) = store.sync_runs.runs.values()
    assert run.status is SyncStatus.FAILED
    assert run.error_message == "boom at 1"


@pytest.mark.parametrize("field", ["workers", "batch_size", "progress_every"])
def test_non_positive_settings_are_rejected(field: str) -> None:
    with pytest.raises(ValueError, match="must be positive"):
        _pipeline(FakeStore(), **{field: 0})
