"""Domain port definitions for adapters."""

from __future__ import annotations

from .persistence import (
    EntityRepository,
    FictitiousNameRepository,
    PartnershipRepository,
    RecordRepository,
    Repository,
    StoreError,
    SyncRunRepository,
)
from .sources import LineSource, SourceReadError
from .unit_of_work import (
    RecordRepositories,
    RecordUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "EntityRepository",
    "FictitiousNameRepository",
    "LineSource",
    "PartnershipRepository",
    "RecordRepositories",
    "RecordRepository",
    "RecordUnitOfWork",
    "Repository",
    "RepositoryCollection",
    "SourceReadError",
    "StoreError",
    "SyncRunRepository",
    "UnitOfWork",
]
