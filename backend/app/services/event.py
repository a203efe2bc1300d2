# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Any, NoReturn

from sqlalchemy import delete, select, update
from sqlmodel import col

from app.exceptions import InvalidTransitionError, NotFoundError, ValidationError
from app.models.base import as_utc
from app.models.enums import AuditAction, AuditEntityType, EventStatus, EventType
from app.models.event import ToilEvent
from app.schemas.event import (
    DeleteEventResponse,
    EventListResponse,
    EventResponse,
    PendingEventListResponse,
    PendingEventResponse,
)
from app.services.audit import model_to_audit_dict, write_audit_log
from app.services.edit_window import ensure_within_edit_window

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from app.schemas.auth import AuthContext
    from app.schemas.event import CreateEventPayload, UpdateEventPayload
    from app.services.user import UserDirectory, UserInfo

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def build_event_response(event: ToilEvent) -> EventResponse:
    """Map an event model to its response schema."""
    return EventResponse(
        id=event.id,
        owner_id=event.owner_id,
        timestamp=as_utc(event.timestamp),
        type=EventType(event.type),
        minutes=event.minutes,
        note=event.note,
        status=EventStatus(event.status),
        approved_by=event.approved_by,
        approval_timestamp=as_utc(event.approval_timestamp) if event.approval_timestamp else None,
        created_at=as_utc(event.created_at),
    )


async def get_event_or_404(session: AsyncSession, event_id: uuid.UUID) -> ToilEvent:
    """Fetch any event by ID. Raises NotFoundError if absent."""
    event = await session.get(ToilEvent, event_id)
    if event is None:
        raise NotFoundError("TOIL event not found")
    return event


async def get_owned_event_or_404(session: AsyncSession, event_id: uuid.UUID, owner_id: str) -> ToilEvent:
    """Fetch an event by ID scoped to its owner.

    Someone else's event is indistinguishable from a missing one.
    """
    result = await session.execute(
        select(ToilEvent).where(
            col(ToilEvent.id) == event_id,
            col(ToilEvent.owner_id) == owner_id,
        )
    )
    event = result.scalar_one_or_none()
    if event is None:
        raise NotFoundError("TOIL event not found")
    return event


async def current_status(session: AsyncSession, event_id: uuid.UUID) -> EventStatus | None:
    """Read the event's status straight from the database, bypassing the identity map."""
    value = await session.scalar(select(ToilEvent.status).where(col(ToilEvent.id) == event_id))
    return EventStatus(value) if value is not None else None


def _ensure_pending(event: ToilEvent, verb: str) -> None:
    if event.status != EventStatus.PENDING.value:
        raise InvalidTransitionError(f"Only pending events can be {verb}; event is {event.status}")


async def raise_lost_race(session: AsyncSession, event_id: uuid.UUID, verb: str) -> NoReturn:
    """Explain why a write conditioned on PENDING matched no rows."""
    status = await current_status(session, event_id)
    if status is None:
        raise NotFoundError("TOIL event not found")
    raise InvalidTransitionError(f"Only pending events can be {verb}; event is {status}")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def create_event(
    session: AsyncSession,
    auth: AuthContext,
    payload: CreateEventPayload,
) -> EventResponse:
    """Log a new event for the caller. Always starts PENDING."""
    event = ToilEvent(
        owner_id=auth.user_id,
        timestamp=payload.timestamp,
        type=payload.type.value,
        minutes=payload.minutes,
        note=payload.note,
        status=EventStatus.PENDING.value,
    )
    session.add(event)
    await session.flush()

    write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.EVENT,
        entity_id=event.id,
        action=AuditAction.CREATE,
        after_json=model_to_audit_dict(event),
    )

    await session.commit()
    await session.refresh(event)
    logger.info(
        "TOIL event created: user=%s event=%s type=%s minutes=%d",
        auth.user_id,
        event.id,
        event.type,
        event.minutes,
    )
    return build_event_response(event)


async def list_events(
    session: AsyncSession,
    owner_id: str,
    status_filter: EventStatus | None = None,
) -> EventListResponse:
    """List the owner's events, newest timestamp first, across all statuses."""
    query = select(ToilEvent).where(col(ToilEvent.owner_id) == owner_id)
    if status_filter is not None:
        query = query.where(col(ToilEvent.status) == status_filter.value)

    result = await session.execute(
        query.order_by(col(ToilEvent.timestamp).desc(), col(ToilEvent.created_at).desc())
    )
    events = list(result.scalars().all())
    return EventListResponse(items=[build_event_response(e) for e in events], total=len(events))


async def get_event(session: AsyncSession, owner_id: str, event_id: uuid.UUID) -> EventResponse:
    """Get one of the owner's events."""
    event = await get_owned_event_or_404(session, event_id, owner_id)
    return build_event_response(event)


async def update_event(
    session: AsyncSession,
    auth: AuthContext,
    event_id: uuid.UUID,
    payload: UpdateEventPayload,
    now: datetime | None = None,
) -> EventResponse:
    """Apply an owner's correction to a pending event created today.

    The write is conditioned on the event still being PENDING, so a manager
    decision landing between the read and the write wins.
    """
    event = await get_owned_event_or_404(session, event_id, auth.user_id)
    ensure_within_edit_window(event.created_at, now)
    _ensure_pending(event, "edited")

    changes: dict[str, Any] = payload.model_dump(exclude_unset=True)
    if not changes:
        raise ValidationError("No fields to update")
    if "type" in changes:
        changes["type"] = EventType(changes["type"]).value
    if "note" in changes:
        changes["note"] = changes["note"] or None

    before_dict = model_to_audit_dict(event)
    result = await session.execute(
        update(ToilEvent)
        .where(
            col(ToilEvent.id) == event_id,
            col(ToilEvent.owner_id) == auth.user_id,
            col(ToilEvent.status) == EventStatus.PENDING.value,
        )
        .values(**changes)
    )
    if result.rowcount == 0:  # type: ignore[attr-defined]
        await raise_lost_race(session, event_id, "edited")

    await session.refresh(event)
    write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.EVENT,
        entity_id=event.id,
        action=AuditAction.UPDATE,
        before_json=before_dict,
        after_json=model_to_audit_dict(event),
    )

    await session.commit()
    await session.refresh(event)
    logger.info("TOIL event updated: user=%s event=%s fields=%s", auth.user_id, event_id, sorted(changes))
    return build_event_response(event)


async def delete_event(
    session: AsyncSession,
    auth: AuthContext,
    event_id: uuid.UUID,
    now: datetime | None = None,
) -> DeleteEventResponse:
    """Undo one of the caller's pending events created today."""
    event = await get_owned_event_or_404(session, event_id, auth.user_id)
    ensure_within_edit_window(event.created_at, now)
    _ensure_pending(event, "deleted")

    before_dict = model_to_audit_dict(event)
    result = await session.execute(
        delete(ToilEvent).where(
            col(ToilEvent.id) == event_id,
            col(ToilEvent.owner_id) == auth.user_id,
            col(ToilEvent.status) == EventStatus.PENDING.value,
        )
    )
    if result.rowcount == 0:  # type: ignore[attr-defined]
        await raise_lost_race(session, event_id, "deleted")

    write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.EVENT,
        entity_id=event_id,
        action=AuditAction.DELETE,
        before_json=before_dict,
    )

    await session.commit()
    logger.info("TOIL event deleted: user=%s event=%s", auth.user_id, event_id)
    return DeleteEventResponse(success=True)


async def list_pending(session: AsyncSession, directory: UserDirectory) -> PendingEventListResponse:
    """List every PENDING event, newest timestamp first, with owner identity attached.

    Callers must have passed the manager gate.
    """
    result = await session.execute(
        select(ToilEvent)
        .where(col(ToilEvent.status) == EventStatus.PENDING.value)
        .order_by(col(ToilEvent.timestamp).desc(), col(ToilEvent.created_at).desc())
    )
    events = list(result.scalars().all())

    owners: dict[str, UserInfo | None] = {}
    items: list[PendingEventResponse] = []
    for event in events:
        if event.owner_id not in owners:
            owners[event.owner_id] = await directory.get_user(event.owner_id)
        owner = owners[event.owner_id]
        items.append(
            PendingEventResponse(
                **build_event_response(event).model_dump(),
                owner_name=owner.name if owner else None,
                owner_email=owner.email if owner else None,
            )
        )

    return PendingEventListResponse(items=items, total=len(items))
