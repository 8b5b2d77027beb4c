from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import UTC, date, datetime, timedelta
from typing import TYPE_CHECKING

from sqlalchemy import select

from bizname.adapters.sqlalchemy.mappings import business_entity_table
from bizname.adapters.sqlalchemy.repositories import prefix_successor
from bizname.domain.model import (
    EntityRecord,
    FictitiousNameRecord,
    RecordKind,
    RunCounts,
    RunType,
    StoredRecord,
    SyncRun,
    SyncStatus,
)
from bizname.domain.normalization import normalize
from tests.helpers.fakes import make_entity, make_fictitious_name, make_partnership

if TYPE_CHECKING:
    from collections.abc import Callable

    from bizname.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork
    from bizname.domain.model import BusinessRecord

    UnitOfWorkFactory = Callable[[], SqlAlchemyUnitOfWork]

WRITTEN_AT = datetime(2026, 3, 1, 9, 30, tzinfo=UTC)


def _stored[TRecord: BusinessRecord](
    record: TRecord, *, at: datetime = WRITTEN_AT
) -> StoredRecord[TRecord]:
    return StoredRecord(record=record, normalized_name=normalize(record.name), last_updated=at)


def _upsert(
    factory: UnitOfWorkFactory, *records: BusinessRecord, at: datetime = WRITTEN_AT
) -> None:
    with factory() as uow:
        for record in records:
            uow.repositories.for_kind(record.kind).upsert(_stored(record, at=at))
        uow.commit()


def test_entity_round_trips_every_field(sqlite_unit_of_work: UnitOfWorkFactory) -> None:
    record = EntityRecord(
        document_number="L23000123456",
        name="Sunshine Consulting LLC",
        status="A",
        filing_date=date(2023, 1, 15),
        principal_address="100 Main St, Tampa, FL, 33602",
        mailing_address=None,
        filing_type="FLAL",
        entity_type="LLC",
        registered_agent="Jane Agent",
        fei_number="123456789",
        last_transaction_date=date(2024, 3, 1),
    )
    _upsert(sqlite_unit_of_work, record)

    with sqlite_unit_of_work() as uow:
        stored = uow.repositories.entities.get("L23000123456")

    assert stored is not None
    assert stored.record == record
    assert stored.normalized_name == "SUNSHINE CONSULTING"
    assert stored.last_updated == WRITTEN_AT
    assert stored.kind is RecordKind.ENTITY


def test_fictitious_name_round_trips_counts_and_dates(
    sqlite_unit_of_work: UnitOfWorkFactory,
) -> None:
    record = FictitiousNameRecord(
        document_number="G23000045678",
        name="Sunshine Bakery",
        status="E",
        county="HILLSBOROUGH",
        expiration_date=date(2028, 12, 31),
        number_of_owners=2,
    )
    _upsert(sqlite_unit_of_work, record)

    with sqlite_unit_of_work() as uow:
        stored = uow.repositories.fictitious_names.get("G23000045678")

    assert stored is not None
    assert stored.record == record


def test_upsert_replaces_fields_but_keeps_creation_time(
    sqlite_unit_of_work: UnitOfWorkFactory,
) -> None:
    later = WRITTEN_AT + timedelta(days=1)
    _upsert(sqlite_unit_of_work, make_entity("E1", "Acme LLC"))
    _upsert(sqlite_unit_of_work, make_entity("E1", "Acme Widgets LLC", status="I"), at=later)

    with sqlite_unit_of_work() as uow:
        repository = uow.repositories.entities
        stored = repository.get("E1")
        created_at = uow.session.execute(
            select(business_entity_table.c.created_at).where(
                business_entity_table.c.document_number == "E1"
            )
        ).scalar_one()
        total = repository.count()

    assert total == 1
    assert stored is not None
    assert stored.record.name == "Acme Widgets LLC"
    assert stored.record.status == "I"
    assert stored.normalized_name == "ACME WIDGET"
    assert stored.last_updated == later
    assert created_at == WRITTEN_AT


def test_missing_document_returns_none(sqlite_unit_of_work: UnitOfWorkFactory) -> None:
    with sqlite_unit_of_work() as uow:
        assert uow.repositories.partnerships.get("nope") is None
        assert uow.repositories.partnerships.count() == 0


def test_prefix_lookup_matches_only_names_starting_with_key(
    sqlite_unit_of_work: UnitOfWorkFactory,
) -> None:
    _upsert(
        sqlite_unit_of_work,
        make_entity("E1", "Sunshine Consulting LLC"),
        make_entity("E2", "Sunshine LLC"),
        make_entity("E3", "Sunshiner Tours"),
        make_entity("E4", "The Sun Shine"),
        make_entity("E5", "Bright Sunshine"),
    )

    with sqlite_unit_of_work() as uow:
        found = uow.repositories.entities.find_by_normalized_prefix("SUNSHINE", limit=10)
        exact = uow.repositories.entities.find_by_normalized_prefix(
            "SUNSHINE CONSULTING", limit=10
        )

    assert {item.document_number for item in found} == {"E1", "E2", "E3"}
    assert [item.document_number for item in exact] == ["E1"]


def test_prefix_lookup_honours_limit_and_empty_key(
    sqlite_unit_of_work: UnitOfWorkFactory,
) -> None:
    _upsert(sqlite_unit_of_work, *(make_entity(f"E{index}", f"Acme {index}") for index in range(5)))

    with sqlite_unit_of_work() as uow:
        limited = uow.repositories.entities.find_by_normalized_prefix("ACME", limit=2)
        empty = uow.repositories.entities.find_by_normalized_prefix("", limit=10)

    assert len(limited) == 2
    assert empty == []


def test_record_kinds_are_stored_separately(sqlite_unit_of_work: UnitOfWorkFactory) -> None:
    _upsert(
        sqlite_unit_of_work,
        make_entity("X1", "Acme"),
        make_fictitious_name("X1", "Acme"),
        make_partnership("X1", "Acme", effective_date=date(2020, 1, 1)),
    )

    with sqlite_unit_of_work() as uow:
        repositories = uow.repositories
        counts = [repositories.for_kind(kind).count() for kind in RecordKind]
        partnership = repositories.partnerships.find_by_normalized_prefix("ACME", limit=5)

    assert counts == [1, 1, 1]
    assert partnership[0].record.relevant_date == date(2020, 1, 1)


def test_prefix_successor() -> None:
    assert prefix_successor("ABC") == "ABD"
    assert prefix_successor("A Z") == "A ["


def test_sync_runs_are_saved_updated_and_queried(sqlite_unit_of_work: UnitOfWorkFactory) -> None:
    older = SyncRun(kind=RecordKind.ENTITY, started_at=WRITTEN_AT - timedelta(days=1))
    newer = SyncRun(
        kind=RecordKind.ENTITY,
        run_type=RunType.INCREMENTAL,
        source_path="/data/cordata0.txt",
        layout_version="cordata-2024.1",
        started_at=WRITTEN_AT,
    )
    partnership = SyncRun(kind=RecordKind.PARTNERSHIP, started_at=WRITTEN_AT)
    with sqlite_unit_of_work() as uow:
        for run in (older, newer, partnership):
            uow.repositories.sync_runs.add(run)
        uow.commit()

    newer.complete(RunCounts(processed=5, added=4, parse_errors=1), at=WRITTEN_AT)
    with sqlite_unit_of_work() as uow:
        uow.repositories.sync_runs.add(newer)
        uow.commit()

    with sqlite_unit_of_work() as uow:
        runs = uow.repositories.sync_runs
        latest = runs.latest(RecordKind.ENTITY)
        fetched = runs.get(older.id)
        per_kind = runs.latest_per_kind()
        missing = runs.latest(RecordKind.FICTITIOUS_NAME)

    assert latest is not None
    assert latest.id == newer.id
    assert latest.status is SyncStatus.COMPLETED
    assert latest.run_type is RunType.INCREMENTAL
    assert latest.counts == RunCounts(processed=5, added=4, parse_errors=1)
    assert latest.layout_version == "cordata-2024.1"
    assert latest.completed_at == WRITTEN_AT
    assert fetched is not None
    assert fetched.status is SyncStatus.IN_PROGRESS
    assert set(per_kind) == {RecordKind.ENTITY, RecordKind.PARTNERSHIP}
    assert per_kind[RecordKind.ENTITY].id == newer.id
    assert missing is None


def test_concurrent_upserts_of_one_key_leave_one_whole_row(
    sqlite_unit_of_work: UnitOfWorkFactory,
) -> None:
    versions = {
        f"Acme Holdings {index} LLC": WRITTEN_AT + timedelta(minutes=index) for index in range(8)
    }
    barrier = threading.Barrier(len(versions))

    def write(name: str, at: datetime) -> None:
        barrier.wait()
        _upsert(sqlite_unit_of_work, make_entity("L23000000777", name), at=at)

    with ThreadPoolExecutor(max_workers=len(versions)) as pool:
        futures = [pool.submit(write, name, at) for name, at in versions.items()]
        for future in futures:
            future.result()

    with sqlite_unit_of_work() as uow:
        repository = uow.repositories.entities
        total = repository.count()
        stored = repository.get("L23000000777")

    assert total == 1
    assert stored is not None
    assert stored.record.name in versions
    assert stored.normalized_name == normalize(stored.record.name)
    assert stored.last_updated == versions[stored.record.name]
