"""SQLAlchemy tables for the record stores and the sync-run ledger.

Business records are stored through Core tables whose column names match the
record dataclass fields, so repositories can convert rows without an ORM
mapping. ``SyncRun`` is mapped imperatively onto ``sync_run``.
"""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from functools import cache
from typing import Any, Final

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    Dialect,
    Enum,
    Index,
    Integer,
    String,
    Table,
    TypeDecorator,
    Uuid,
    orm,
)
from sqlalchemy.orm import configure_mappers

from bizname.domain.model import RecordKind, RunType, SyncRun, SyncStatus

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


def _record_columns() -> list[Column[Any]]:
    """Columns shared by every record-kind table."""

    return [
        Column("document_number", String(12), primary_key=True),
        Column("name", String, nullable=False),
        Column("normalized_name", String, nullable=False),
        Column("status", String(1), nullable=False),
        Column("filing_date", Date, nullable=True),
        Column("principal_address", String, nullable=True),
        Column("mailing_address", String, nullable=True),
        Column("last_updated", UTCDateTime(), nullable=False),
        Column("created_at", UTCDateTime(), nullable=False),
    ]


# Core tables -----------------------------------------------------------------

business_entity_table = Table(
    "business_entity",
    mapper_registry.metadata,
    *_record_columns(),
    Column("filing_type", String(15), nullable=True),
    Column("entity_type", String, nullable=True),
    Column("registered_agent", String, nullable=True),
    Column("fei_number", String(14), nullable=True),
    Column("last_transaction_date", Date, nullable=True),
    Index("ix_business_entity_normalized_name", "normalized_name"),
)

fictitious_name_table = Table(
    "fictitious_name",
    mapper_registry.metadata,
    *_record_columns(),
    Column("county", String(12), nullable=True),
    Column("cancellation_date", Date, nullable=True),
    Column("expiration_date", Date, nullable=True),
    Column("number_of_owners", Integer, nullable=False, default=0),
    Index("ix_fictitious_name_normalized_name", "normalized_name"),
)

general_partnership_table = Table(
    "general_partnership",
    mapper_registry.metadata,
    *_record_columns(),
    Column("effective_date", Date, nullable=True),
    Column("cancellation_date", Date, nullable=True),
    Column("expiration_date", Date, nullable=True),
    Column("number_of_partners", Integer, nullable=False, default=0),
    Index("ix_general_partnership_normalized_name", "normalized_name"),
)

sync_run_table = Table(
    "sync_run",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("kind", Enum(RecordKind, native_enum=False), nullable=False),
    Column("run_type", Enum(RunType, native_enum=False), nullable=False),
    Column("status", Enum(SyncStatus, native_enum=False), nullable=False),
    Column("source_path", String, nullable=True),
    Column("layout_version", String, nullable=True),
    Column("processed", Integer, nullable=False, default=0),
    Column("added", Integer, nullable=False, default=0),
    Column("parse_errors", Integer, nullable=False, default=0),
    Column("store_errors", Integer, nullable=False, default=0),
    Column("started_at", UTCDateTime(), nullable=False),
    Column("completed_at", UTCDateTime(), nullable=True),
    Column("error_message", String, nullable=True),
    Index("ix_sync_run_kind_started_at", "kind", "started_at"),
)

RECORD_TABLE_BY_KIND: Final[dict[RecordKind, Table]] = {
    RecordKind.ENTITY: business_entity_table,
    RecordKind.FICTITIOUS_NAME: fictitious_name_table,
    RecordKind.PARTNERSHIP: general_partnership_table,
}


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(SyncRun, sync_run_table)

    configure_mappers()
    return mapper_registry
