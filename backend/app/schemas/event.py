# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Annotated, Self

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator, model_validator

from app.models.base import as_utc
from app.models.enums import EventStatus, EventType
from app.models.event import MINUTES_MAX, NOTE_MAX_LENGTH

# JSON integers only: booleans and numeric strings are rejected.
EventMinutes = Annotated[StrictInt, Field(gt=0, le=MINUTES_MAX, description="Whole minutes, always positive")]


def _utc_timestamp(value: datetime) -> datetime:
    try:
        return as_utc(value)
    except OverflowError:
        msg = "timestamp out of range"
        raise ValueError(msg) from None


# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class CreateEventPayload(BaseModel):
    """Request body for logging a new TOIL event."""

    timestamp: datetime
    type: EventType
    minutes: EventMinutes
    note: str | None = Field(default=None, max_length=NOTE_MAX_LENGTH)

    @field_validator("timestamp")
    @classmethod
    def _normalize_timestamp(cls, value: datetime) -> datetime:
        return _utc_timestamp(value)

    @field_validator("note")
    @classmethod
    def _blank_note_to_none(cls, value: str | None) -> str | None:
        return value or None


class UpdateEventPayload(BaseModel):
    """Partial update of an event's owner-editable fields.

    Only fields present in the body are applied. ``note`` may be set to null
    to clear it; the other fields cannot be nulled.
    """

    model_config = ConfigDict(extra="forbid")

    timestamp: datetime | None = None
    type: EventType | None = None
    minutes: EventMinutes | None = None
    note: str | None = Field(default=None, max_length=NOTE_MAX_LENGTH)

    @field_validator("timestamp")
    @classmethod
    def _normalize_timestamp(cls, value: datetime | None) -> datetime | None:
        return _utc_timestamp(value) if value is not None else None

    @model_validator(mode="after")
    def _reject_null_required_fields(self) -> Self:
        for name in ("timestamp", "type", "minutes"):
            if name in self.model_fields_set and getattr(self, name) is None:
                msg = f"{name} cannot be null"
                raise ValueError(msg)
        return self


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class EventResponse(BaseModel):
    """Response schema for a single TOIL event."""

    id: uuid.UUID
    owner_id: str
    timestamp: datetime
    type: EventType
    minutes: int
    note: str | None
    status: EventStatus
    approved_by: str | None
    approval_timestamp: datetime | None
    created_at: datetime


class EventListResponse(BaseModel):
    """A user's events, newest timestamp first."""

    items: list[EventResponse]
    total: int


class PendingEventResponse(EventResponse):
    """A pending event with the owner's identity attached for review."""

    owner_name: str | None
    owner_email: str | None


class PendingEventListResponse(BaseModel):
    """Events awaiting a manager decision."""

    items: list[PendingEventResponse]
    total: int


class DeleteEventResponse(BaseModel):
    """Result of an undo/delete."""

    success: bool
