# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query, status

from app.api.deps import AuthDep, DirectoryDep, ManagerDep
from app.db import SessionDep
from app.models.enums import EventStatus
from app.schemas.event import (
    CreateEventPayload,
    DeleteEventResponse,
    EventListResponse,
    EventResponse,
    PendingEventListResponse,
    UpdateEventPayload,
)
from app.services import approval as approval_service
from app.services import event as event_service

events_router = APIRouter(prefix="/events", tags=["events"])


@events_router.post("", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event(
    payload: CreateEventPayload,
    session: SessionDep,
    auth: AuthDep,
) -> EventResponse:
    """Log a new TOIL event for the caller."""
    return await event_service.create_event(session, auth, payload)


@events_router.get("", response_model=EventListResponse)
async def list_events(
    session: SessionDep,
    auth: AuthDep,
    status_filter: EventStatus | None = Query(default=None, alias="status"),
) -> EventListResponse:
    """List the caller's events, newest first."""
    return await event_service.list_events(session, auth.user_id, status_filter)


@events_router.get("/pending", response_model=PendingEventListResponse)
async def list_pending_events(
    session: SessionDep,
    auth: ManagerDep,
    directory: DirectoryDep,
) -> PendingEventListResponse:
    """List every event awaiting a decision (manager only)."""
    return await event_service.list_pending(session, directory)


@events_router.get("/{event_id}", response_model=EventResponse)
async def get_event(
    event_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> EventResponse:
    """Get one of the caller's events."""
    return await event_service.get_event(session, auth.user_id, event_id)


@events_router.patch("/{event_id}", response_model=EventResponse)
async def update_event(
    event_id: uuid.UUID,
    payload: UpdateEventPayload,
    session: SessionDep,
    auth: AuthDep,
) -> EventResponse:
    """Correct one of the caller's pending events created today."""
    return await event_service.update_event(session, auth, event_id, payload)


@events_router.delete("/{event_id}", response_model=DeleteEventResponse)
async def delete_event(
    event_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> DeleteEventResponse:
    """Undo one of the caller's pending events created today."""
    return await event_service.delete_event(session, auth, event_id)


@events_router.post("/{event_id}/approve", response_model=EventResponse)
async def approve_event(
    event_id: uuid.UUID,
    session: SessionDep,
    auth: ManagerDep,
) -> EventResponse:
    """Approve a pending event (manager only)."""
    return await approval_service.approve_event(session, auth, event_id)


@events_router.post("/{event_id}/reject", response_model=EventResponse)
async def reject_event(
    event_id: uuid.UUID,
    session: SessionDep,
    auth: ManagerDep,
) -> EventResponse:
    """Reject a pending event (manager only)."""
    return await approval_service.reject_event(session, auth, event_id)
