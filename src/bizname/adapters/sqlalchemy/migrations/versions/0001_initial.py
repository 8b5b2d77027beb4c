"""Create record stores and the sync-run ledger.

Revision ID: 0001_initial
Revises:
Create Date: 2024-06-01 00:00:00
"""

from __future__ import annotations

from typing import Any

import sqlalchemy as sa
from alembic import op

from bizname.adapters.sqlalchemy.mappings import UTCDateTime

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def _record_columns() -> list[sa.Column[Any]]:
    return [
        sa.Column("document_number", sa.String(length=12), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("normalized_name", sa.String(), nullable=False),
        sa.Column("status", sa.String(length=1), nullable=False),
        sa.Column("filing_date", sa.Date(), nullable=True),
        sa.Column("principal_address", sa.String(), nullable=True),
        sa.Column("mailing_address", sa.String(), nullable=True),
        sa.Column("last_updated", UTCDateTime(), nullable=False),
        sa.Column("created_at", UTCDateTime(), nullable=False),
    ]


def _create_record_table(name: str, *extra: sa.Column[Any]) -> None:
    op.create_table(
        name,
        *_record_columns(),
        *extra,
        sa.PrimaryKeyConstraint("document_number", name=op.f(f"pk_{name}")),
    )
    with op.batch_alter_table(name, schema=None) as batch_op:
        batch_op.create_index(f"ix_{name}_normalized_name", ["normalized_name"], unique=False)


def upgrade() -> None:
    _create_record_table(
        "business_entity",
        sa.Column("filing_type", sa.String(length=15), nullable=True),
        sa.Column("entity_type", sa.String(), nullable=True),
        sa.Column("registered_agent", sa.String(), nullable=True),
        sa.Column("fei_number", sa.String(length=14), nullable=True),
        sa.Column("last_transaction_date", sa.Date(), nullable=True),
    )
    _create_record_table(
        "fictitious_name",
        sa.Column("county", sa.String(length=12), nullable=True),
        sa.Column("cancellation_date", sa.Date(), nullable=True),
        sa.Column("expiration_date", sa.Date(), nullable=True),
        sa.Column("number_of_owners", sa.Integer(), nullable=False),
    )
    _create_record_table(
        "general_partnership",
        sa.Column("effective_date", sa.Date(), nullable=True),
        sa.Column("cancellation_date", sa.Date(), nullable=True),
        sa.Column("expiration_date", sa.Date(), nullable=True),
        sa.Column("number_of_partners", sa.Integer(), nullable=False),
    )

    op.create_table(
        "sync_run",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column(
            "kind",
            sa.Enum(
                "ENTITY",
                "FICTITIOUS_NAME",
                "PARTNERSHIP",
                name="recordkind",
                native_enum=False,
            ),
            nullable=False,
        ),
        sa.Column(
            "run_type",
            sa.Enum("FULL", "INCREMENTAL", name="runtype", native_enum=False),
            nullable=False,
        ),
        sa.Column(
            "status",
            sa.Enum("IN_PROGRESS", "COMPLETED", "FAILED", name="syncstatus", native_enum=False),
            nullable=False,
        ),
        sa.Column("source_path", sa.String(), nullable=True),
        sa.Column("layout_version", sa.String(), nullable=True),
        sa.Column("processed", sa.Integer(), nullable=False),
        sa.Column("added", sa.Integer(), nullable=False),
        sa.Column("parse_errors", sa.Integer(), nullable=False),
        sa.Column("store_errors", sa.Integer(), nullable=False),
        sa.Column("started_at", UTCDateTime(), nullable=False),
        sa.Column("completed_at", UTCDateTime(), nullable=True),
        sa.Column("error_message", sa.String(), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_sync_run")),
    )
    with op.batch_alter_table("sync_run", schema=None) as batch_op:
        batch_op.create_index("ix_sync_run_kind_started_at", ["kind", "started_at"], unique=False)


def downgrade() -> None:
    with op.batch_alter_table("sync_run", schema=None) as batch_op:
        batch_op.drop_index("ix_sync_run_kind_started_at")
    op.drop_table("sync_run")

    for name in ("general_partnership", "fictitious_name", "business_entity"):
        with op.batch_alter_table(name, schema=None) as batch_op:
            batch_op.drop_index(f"ix_{name}_normalized_name")
        op.drop_table(name)
