"""toil events and audit log

Revision ID: 0001
Revises:
Create Date: 2026-10-19

Creates the toil_event ledger and the audit_log table.
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "toil_event",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("owner_id", sa.String(length=255), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("type", sa.String(length=10), nullable=False),
        sa.Column("minutes", sa.Integer(), nullable=False),
        sa.Column("note", sa.String(length=200), nullable=True),
        sa.Column("status", sa.String(length=20), server_default="PENDING", nullable=False),
        sa.Column("approved_by", sa.String(length=255), nullable=True),
        sa.Column("approval_timestamp", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("minutes > 0", name="ck_toil_event_minutes_positive"),
        sa.CheckConstraint("type IN ('ADD', 'TAKE')", name="ck_toil_event_type"),
        sa.CheckConstraint(
            "(status = 'PENDING' AND approved_by IS NULL AND approval_timestamp IS NULL)"
            " OR (status <> 'PENDING' AND approved_by IS NOT NULL AND approval_timestamp IS NOT NULL)",
            name="ck_toil_event_approval_stamp",
        ),
    )
    op.create_index("ix_toil_event_created_at", "toil_event", ["created_at"])
    op.create_index("ix_toil_event_owner_id", "toil_event", ["owner_id"])
    op.create_index("ix_toil_event_owner_timestamp", "toil_event", ["owner_id", "timestamp"])
    op.create_index("ix_toil_event_status_timestamp", "toil_event", ["status", "timestamp"])

    op.create_table(
        "audit_log",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("actor_id", sa.String(length=255), nullable=False),
        sa.Column("entity_type", sa.String(length=50), nullable=False),
        sa.Column("entity_id", sa.String(length=255), nullable=False),
        sa.Column("action", sa.String(length=50), nullable=False),
        sa.Column("before_json", sa.JSON(), nullable=True),
        sa.Column("after_json", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_audit_entity", "audit_log", ["entity_type", "entity_id"])
    op.create_index("ix_audit_log_actor_id", "audit_log", ["actor_id"])
    op.create_index("ix_audit_log_created_at", "audit_log", ["created_at"])


def downgrade() -> None:
    op.drop_table("audit_log")
    op.drop_table("toil_event")
