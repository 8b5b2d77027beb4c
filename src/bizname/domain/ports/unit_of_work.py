"""Unit-of-work abstractions for coordinating repositories."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from bizname.domain.model import RecordKind

if TYPE_CHECKING:
    from types import TracebackType

    from bizname.domain.ports.persistence import (
        EntityRepository,
        FictitiousNameRepository,
        PartnershipRepository,
        RecordRepository,
        SyncRunRepository,
    )


@runtime_checkable
class RepositoryCollection(Protocol):
    """Marker protocol for groups of repositories managed together."""


@runtime_checkable
class UnitOfWork[TRepositories: RepositoryCollection](Protocol):
    """Generic unit-of-work boundary around a repository collection."""

    @property
    def repositories(self) -> TRepositories: ...

    def __enter__(self) -> UnitOfWork[TRepositories]: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


@dataclass(slots=True)
class RecordRepositories(RepositoryCollection):
    """Repositories for the three record kinds plus the sync-run ledger."""

    entities: EntityRepository
    fictitious_names: FictitiousNameRepository
    partnerships: PartnershipRepository
    sync_runs: SyncRunRepository

    def for_kind(self, kind: RecordKind) -> RecordRepository:
        match kind:
            case RecordKind.ENTITY:
                return self.entities
            case RecordKind.FICTITIOUS_NAME:
                return self.fictitious_names
            case RecordKind.PARTNERSHIP:
                return self.partnerships


type RecordUnitOfWork = UnitOfWork[RecordRepositories]
