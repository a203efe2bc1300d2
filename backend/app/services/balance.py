from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

from sqlalchemy import select
from sqlmodel import col

from app.models.enums import EventStatus, EventType
from app.models.event import ToilEvent
from app.schemas.balance import BalanceResponse

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

# Statuses counted toward the provisional total.
_TOTAL_STATUSES = (EventStatus.PENDING.value, EventStatus.APPROVED.value)


class BalanceEntry(Protocol):
    """Anything carrying the three fields the calculator reads."""

    type: str
    minutes: int
    status: str


# ---------------------------------------------------------------------------
# Pure calculation
# ---------------------------------------------------------------------------


def calculate_balance(events: Iterable[BalanceEntry]) -> BalanceResponse:
    """Derive the total and available balances from a set of events.

    Single pass, integer arithmetic only, and independent of input order.
    """
    add_minutes = take_minutes = 0
    available_add = available_take = 0

    for event in events:
        status = str(event.status)
        if status not in _TOTAL_STATUSES:
            continue
        approved = status == EventStatus.APPROVED.value
        if str(event.type) == EventType.ADD.value:
            add_minutes += event.minutes
            if approved:
                available_add += event.minutes
        else:
            take_minutes += event.minutes
            if approved:
                available_take += event.minutes

    return BalanceResponse(
        balance=add_minutes - take_minutes,
        add_minutes=add_minutes,
        take_minutes=take_minutes,
        available_balance=available_add - available_take,
        available_add_minutes=available_add,
        available_take_minutes=available_take,
    )


def format_minutes(minutes: int) -> str:
    """Render a signed minute count as ``Xh Ym`` (e.g. ``1h 30m``, ``45m``, ``−2h``)."""
    sign = "−" if minutes < 0 else ""
    hours, mins = divmod(abs(minutes), 60)
    if hours == 0:
        return f"{sign}{mins}m"
    if mins == 0:
        return f"{sign}{hours}h"
    return f"{sign}{hours}h {mins}m"


def snap_to_five_minutes(minutes: int) -> int:
    """Round down to the nearest 5-minute increment."""
    return (minutes // 5) * 5


# ---------------------------------------------------------------------------
# Read path
# ---------------------------------------------------------------------------


async def get_balance(session: AsyncSession, owner_id: str) -> BalanceResponse:
    """Recompute the owner's balances from their full event log."""
    result = await session.execute(
        select(ToilEvent).where(
            col(ToilEvent.owner_id) == owner_id,
            col(ToilEvent.status).in_(_TOTAL_STATUSES),
        )
    )
    balance = calculate_balance(result.scalars().all())
    logger.info(
        "Balance calculated for user=%s: balance=%d available=%d",
        owner_id,
        balance.balance,
        balance.available_balance,
    )
    return balance
