"""Ports for persisting business records and the sync-run ledger."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from bizname.domain.model import (
    BusinessRecord,
    EntityRecord,
    FictitiousNameRecord,
    PartnershipRecord,
    RecordKind,
    StoredRecord,
    SyncRun,
)

if TYPE_CHECKING:
    from uuid import UUID


class StoreError(RuntimeError):
    """Raised when the record store cannot complete a read or write."""


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class RecordRepository[TRecord: BusinessRecord](Protocol):
    """Keyed store of one record kind, searchable by normalized-name prefix."""

    def upsert(self, stored: StoredRecord[TRecord]) -> None: ...

    def get(self, document_number: str) -> StoredRecord[TRecord] | None: ...

    def find_by_normalized_prefix(self, key: str, *, limit: int) -> list[StoredRecord[TRecord]]:
        """Return at most ``limit`` records whose normalized name starts with ``key``.

        An empty ``key`` never matches anything. No ordering is guaranteed.
        """
        ...

    def count(self) -> int: ...


@runtime_checkable
class EntityRepository(RecordRepository[EntityRecord], Protocol):
    """Repository contract for registered business entities."""


@runtime_checkable
class FictitiousNameRepository(RecordRepository[FictitiousNameRecord], Protocol):
    """Repository contract for fictitious-name registrations."""


@runtime_checkable
class PartnershipRepository(RecordRepository[PartnershipRecord], Protocol):
    """Repository contract for general partnerships."""


@runtime_checkable
class SyncRunRepository(Repository[SyncRun], Protocol):
    """Ledger of ingestion runs."""

    def get(self, run_id: UUID) -> SyncRun | None: ...

    def latest(self, kind: RecordKind) -> SyncRun | None: ...

    def latest_per_kind(self) -> dict[RecordKind, SyncRun]: ...
