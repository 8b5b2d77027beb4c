"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

import dataclasses
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, insert, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError

from bizname.adapters.sqlalchemy.mappings import RECORD_TABLE_BY_KIND, sync_run_table
from bizname.domain.model import (
    BusinessRecord,
    EntityRecord,
    FictitiousNameRecord,
    PartnershipRecord,
    RecordKind,
    StoredRecord,
    SyncRun,
)
from bizname.domain.ports.persistence import StoreError

if TYPE_CHECKING:
    from collections.abc import Mapping
    from uuid import UUID

    from sqlalchemy import Table
    from sqlalchemy.orm import Session


_UPSERT_DIALECTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


def prefix_successor(key: str) -> str:
    """Smallest string greater than every string starting with ``key``."""

    return key[:-1] + chr(ord(key[-1]) + 1)


class SqlAlchemyRecordRepository[TRecord: BusinessRecord]:
    """Keyed record store over one Core table.

    Column names match the record dataclass fields, plus ``normalized_name``,
    ``last_updated`` and ``created_at``.
    """

    def __init__(self, session: Session, record_cls: type[TRecord]) -> None:
        self.session = session
        self._record_cls = record_cls
        self._table: Table = RECORD_TABLE_BY_KIND[record_cls.KIND]
        self._field_names = tuple(field.name for field in dataclasses.fields(record_cls))

    def upsert(self, stored: StoredRecord[TRecord]) -> None:
        values = self._values(stored)
        try:
            dialect_insert = _UPSERT_DIALECTS.get(self.session.get_bind().dialect.name)
            if dialect_insert is None:
                self._merge(values, stored.last_updated)
                return
            stmt = dialect_insert(self._table).values(**values, created_at=stored.last_updated)
            stmt = stmt.on_conflict_do_update(
                index_elements=[self._table.c.document_number],
                set_={name: stmt.excluded[name] for name in values if name != "document_number"},
            )
            self.session.execute(stmt)
        except SQLAlchemyError as exc:
            raise StoreError(
                f"Could not upsert {self._record_cls.KIND} {stored.document_number}: {exc}"
            ) from exc

    def get(self, document_number: str) -> StoredRecord[TRecord] | None:
        stmt = select(self._table).where(self._table.c.document_number == document_number)
        row = self._read(stmt).first()
        return None if row is None else self._to_stored(row)

    def find_by_normalized_prefix(self, key: str, *, limit: int) -> list[StoredRecord[TRecord]]:
        if not key or limit <= 0:
            return []
        column = self._table.c.normalized_name
        stmt = (
            select(self._table)
            .where(column >= key)
            .where(column < prefix_successor(key))
            .where(column.startswith(key, autoescape=True))
            .limit(limit)
        )
        return [self._to_stored(row) for row in self._read(stmt)]

    def count(self) -> int:
        stmt = select(func.count()).select_from(self._table)
        try:
            return int(self.session.execute(stmt).scalar_one())
        except SQLAlchemyError as exc:
            raise StoreError(f"Could not count {self._record_cls.KIND} records: {exc}") from exc

    def _read(self, stmt: Any) -> Any:
        try:
            return self.session.execute(stmt).mappings()
        except SQLAlchemyError as exc:
            raise StoreError(f"Could not read {self._record_cls.KIND} records: {exc}") from exc

    def _values(self, stored: StoredRecord[TRecord]) -> dict[str, Any]:
        values = {name: getattr(stored.record, name) for name in self._field_names}
        values["normalized_name"] = stored.normalized_name
        values["last_updated"] = stored.last_updated
        return values

    def _merge(self, values: dict[str, Any], created_at: Any) -> None:
        document_number = values["document_number"]
        existing = self.session.execute(
            select(self._table.c.document_number).where(
                self._table.c.document_number == document_number
            )
        ).first()
        if existing is None:
            self.session.execute(insert(self._table).values(**values, created_at=created_at))
            return
        changes = {name: value for name, value in values.items() if name != "document_number"}
        self.session.execute(
            update(self._table)
            .where(self._table.c.document_number == document_number)
            .values(**changes)
        )

    def _to_stored(self, row: Mapping[str, Any]) -> StoredRecord[TRecord]:
        record = self._record_cls(**{name: row[name] for name in self._field_names})
        return StoredRecord(
            record=record,
            normalized_name=row["normalized_name"],
            last_updated=row["last_updated"],
        )


class SqlAlchemyEntityRepository(SqlAlchemyRecordRepository[EntityRecord]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, EntityRecord)


class SqlAlchemyFictitiousNameRepository(SqlAlchemyRecordRepository[FictitiousNameRecord]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, FictitiousNameRecord)


class SqlAlchemyPartnershipRepository(SqlAlchemyRecordRepository[PartnershipRecord]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, PartnershipRecord)


class SqlAlchemySyncRunRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: SyncRun) -> None:
        """Insert ``entity`` or copy its current state onto the stored row."""

        self.session.merge(entity)

    def get(self, run_id: UUID) -> SyncRun | None:
        return self.session.get(SyncRun, run_id)

    def latest(self, kind: RecordKind) -> SyncRun | None:
        stmt = (
            select(SyncRun)
            .where(sync_run_table.c.kind == kind)
            .order_by(sync_run_table.c.started_at.desc())
            .limit(1)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def latest_per_kind(self) -> dict[RecordKind, SyncRun]:
        latest: dict[RecordKind, SyncRun] = {}
        for kind in RecordKind:
            run = self.latest(kind)
            if run is not None:
                latest[kind] = run
        return latest
