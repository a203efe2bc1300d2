"""Manager decisions on TOIL events.

PENDING is the only state with outgoing transitions; APPROVED and REJECTED are
terminal. A decision is written as ``UPDATE ... WHERE status = 'PENDING'`` so
that of two concurrent decisions only the first lands and the approver stamp
is never overwritten.
"""

# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING

from sqlalchemy import update
from sqlmodel import col

from app.models.base import utc_now
from app.models.enums import AuditAction, AuditEntityType, EventStatus
from app.models.event import ToilEvent
from app.services.audit import model_to_audit_dict, write_audit_log
from app.services.event import build_event_response, get_event_or_404, raise_lost_race

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from app.schemas.auth import AuthContext
    from app.schemas.event import EventResponse

logger = logging.getLogger(__name__)

_DECISIONS: dict[EventStatus, tuple[AuditAction, str]] = {
    EventStatus.APPROVED: (AuditAction.APPROVE, "approved"),
    EventStatus.REJECTED: (AuditAction.REJECT, "rejected"),
}


async def _decide(
    session: AsyncSession,
    auth: AuthContext,
    event_id: uuid.UUID,
    new_status: EventStatus,
) -> EventResponse:
    audit_action, verb = _DECISIONS[new_status]
    event = await get_event_or_404(session, event_id)
    before_dict = model_to_audit_dict(event)

    result = await session.execute(
        update(ToilEvent)
        .where(
            col(ToilEvent.id) == event_id,
            col(ToilEvent.status) == EventStatus.PENDING.value,
        )
        .values(
            status=new_status.value,
            approved_by=auth.user_id,
            approval_timestamp=utc_now(),
        )
    )
    if result.rowcount == 0:  # type: ignore[attr-defined]
        logger.warning("Rejected %s of resolved event=%s by manager=%s", verb, event_id, auth.user_id)
        await raise_lost_race(session, event_id, verb)

    await session.refresh(event)
    write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.EVENT,
        entity_id=event.id,
        action=audit_action,
        before_json=before_dict,
        after_json=model_to_audit_dict(event),
    )

    await session.commit()
    await session.refresh(event)
    logger.info("TOIL event %s: event=%s manager=%s", verb, event_id, auth.user_id)
    return build_event_response(event)


async def approve_event(session: AsyncSession, auth: AuthContext, event_id: uuid.UUID) -> EventResponse:
    """Move a PENDING event to APPROVED, stamping the approving manager."""
    return await _decide(session, auth, event_id, EventStatus.APPROVED)


async def reject_event(session: AsyncSession, auth: AuthContext, event_id: uuid.UUID) -> EventResponse:
    """Move a PENDING event to REJECTED, stamping the deciding manager."""
    return await _decide(session, auth, event_id, EventStatus.REJECTED)
