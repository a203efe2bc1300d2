from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta, timezone
from typing import TYPE_CHECKING

import pytest
from sqlalchemy.exc import IntegrityError

from app.db import SQLITE_BUSY_TIMEOUT, engine_options
from app.models import AuditLog, SQLModel, ToilEvent
from app.models.base import as_utc
from app.models.enums import EventStatus, EventType

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

EXPECTED_TABLES = {"audit_log", "toil_event"}


def test_all_tables_registered() -> None:
    assert set(SQLModel.metadata.tables.keys()) == EXPECTED_TABLES


def test_toil_event_defaults() -> None:
    event = ToilEvent(
        owner_id="user-1",
        timestamp=datetime(2025, 3, 1, 9, 0, tzinfo=UTC),
        type=EventType.ADD.value,
        minutes=60,
    )
    assert event.id is not None
    assert event.status == EventStatus.PENDING
    assert event.approved_by is None
    assert event.approval_timestamp is None
    assert event.note is None
    assert event.created_at.tzinfo is not None


def test_audit_log_instantiation() -> None:
    entry = AuditLog(
        actor_id="user-1",
        entity_type="EVENT",
        entity_id=str(uuid.uuid4()),
        action="CREATE",
        after_json={"minutes": 60},
    )
    assert entry.before_json is None
    assert entry.after_json == {"minutes": 60}


def test_as_utc_treats_naive_as_utc() -> None:
    naive = datetime(2025, 3, 1, 23, 30)
    assert as_utc(naive) == datetime(2025, 3, 1, 23, 30, tzinfo=UTC)


def test_as_utc_converts_offsets() -> None:
    aware = datetime(2025, 3, 1, 23, 30, tzinfo=timezone(timedelta(hours=-5)))
    result = as_utc(aware)
    assert result.tzinfo == UTC
    assert result == datetime(2025, 3, 2, 4, 30, tzinfo=UTC)


def test_enum_wire_values() -> None:
    assert [e.value for e in EventType] == ["ADD", "TAKE"]
    assert [e.value for e in EventStatus] == ["PENDING", "APPROVED", "REJECTED"]


# ---------------------------------------------------------------------------
# Database constraints
# ---------------------------------------------------------------------------


async def test_minutes_must_be_positive(db_session: AsyncSession) -> None:
    db_session.add(
        ToilEvent(
            owner_id="user-1",
            timestamp=datetime(2025, 3, 1, 9, 0, tzinfo=UTC),
            type=EventType.ADD.value,
            minutes=0,
        )
    )
    with pytest.raises(IntegrityError):
        await db_session.commit()


async def test_type_is_constrained(db_session: AsyncSession) -> None:
    db_session.add(
        ToilEvent(
            owner_id="user-1",
            timestamp=datetime(2025, 3, 1, 9, 0, tzinfo=UTC),
            type="GIFT",
            minutes=30,
        )
    )
    with pytest.raises(IntegrityError):
        await db_session.commit()


async def test_resolved_event_requires_approval_stamp(db_session: AsyncSession) -> None:
    db_session.add(
        ToilEvent(
            owner_id="user-1",
            timestamp=datetime(2025, 3, 1, 9, 0, tzinfo=UTC),
            type=EventType.ADD.value,
            minutes=30,
            status=EventStatus.APPROVED.value,
        )
    )
    with pytest.raises(IntegrityError):
        await db_session.commit()


async def test_pending_event_cannot_carry_approval_stamp(db_session: AsyncSession) -> None:
    db_session.add(
        ToilEvent(
            owner_id="user-1",
            timestamp=datetime(2025, 3, 1, 9, 0, tzinfo=UTC),
            type=EventType.ADD.value,
            minutes=30,
            approved_by="manager-1",
            approval_timestamp=datetime(2025, 3, 1, 10, 0, tzinfo=UTC),
        )
    )
    with pytest.raises(IntegrityError):
        await db_session.commit()


# ---------------------------------------------------------------------------
# Engine options
# ---------------------------------------------------------------------------


def test_engine_options_for_postgres() -> None:
    assert engine_options("postgresql+asyncpg://toil:toil@db:5432/toil") == {"pool_pre_ping": True}


def test_engine_options_for_sqlite() -> None:
    assert engine_options("sqlite+aiosqlite:///./toil.db") == {"connect_args": {"timeout": SQLITE_BUSY_TIMEOUT}}
