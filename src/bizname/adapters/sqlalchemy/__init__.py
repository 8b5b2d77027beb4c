"""SQLAlchemy adapter package for bizname."""

from __future__ import annotations

from .mappings import (
    RECORD_TABLE_BY_KIND,
    mapper_registry,
    start_mappers,
)
from .repositories import (
    SqlAlchemyEntityRepository,
    SqlAlchemyFictitiousNameRepository,
    SqlAlchemyPartnershipRepository,
    SqlAlchemyRecordRepository,
    SqlAlchemySyncRunRepository,
)
from .unit_of_work import (
    SqlAlchemyUnitOfWork,
    StartupError,
    build_engine,
    configured_engine,
    shutdown,
    startup,
)

__all__ = [
    "RECORD_TABLE_BY_KIND",
    "SqlAlchemyEntityRepository",
    "SqlAlchemyFictitiousNameRepository",
    "SqlAlchemyPartnershipRepository",
    "SqlAlchemyRecordRepository",
    "SqlAlchemySyncRunRepository",
    "SqlAlchemyUnitOfWork",
    "StartupError",
    "build_engine",
    "configured_engine",
    "mapper_registry",
    "start_mappers",
    "shutdown",
    "startup",
]
