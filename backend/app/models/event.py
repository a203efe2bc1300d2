# ruff: noqa: TC003
from __future__ import annotations

from datetime import datetime

import sqlalchemy as sa
from sqlmodel import Field

from app.models.base import TimestampMixin, UUIDBase
from app.models.enums import EventStatus

NOTE_MAX_LENGTH = 200
# Largest value the INTEGER column holds on every supported backend.
MINUTES_MAX = 2_147_483_647


class ToilEvent(UUIDBase, TimestampMixin, table=True):
    """A single ADD or TAKE entry in a user's TOIL ledger."""

    __tablename__ = "toil_event"
    __table_args__ = (
        sa.Index("ix_toil_event_owner_timestamp", "owner_id", "timestamp"),
        sa.Index("ix_toil_event_status_timestamp", "status", "timestamp"),
        sa.CheckConstraint("minutes > 0", name="ck_toil_event_minutes_positive"),
        sa.CheckConstraint("type IN ('ADD', 'TAKE')", name="ck_toil_event_type"),
        sa.CheckConstraint(
            "(status = 'PENDING' AND approved_by IS NULL AND approval_timestamp IS NULL)"
            " OR (status <> 'PENDING' AND approved_by IS NOT NULL AND approval_timestamp IS NOT NULL)",
            name="ck_toil_event_approval_stamp",
        ),
    )

    owner_id: str = Field(max_length=255, index=True)
    timestamp: datetime = Field(sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    type: str = Field(max_length=10)
    minutes: int
    note: str | None = Field(default=None, max_length=NOTE_MAX_LENGTH)
    status: str = Field(default=EventStatus.PENDING, max_length=20, sa_column_kwargs={"server_default": "PENDING"})
    approved_by: str | None = Field(default=None, max_length=255)
    approval_timestamp: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
