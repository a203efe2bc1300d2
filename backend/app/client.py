"""HTTP client for the TOIL API and a local, optimistic event cache.

The cache follows one rule: a local write is shown immediately, then either
replaced by the server's record or rolled back when the server refuses it.
Local and server state are never merged field by field.
"""

from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING, Any, Self

import httpx
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from app.models.base import utc_now
from app.models.enums import EventStatus, EventType, UserRole
from app.schemas.balance import BalanceResponse
from app.schemas.event import (
    CreateEventPayload,
    EventListResponse,
    EventResponse,
    PendingEventListResponse,
    UpdateEventPayload,
)
from app.schemas.user import RoleResponse
from app.services.balance import calculate_balance, snap_to_five_minutes

if TYPE_CHECKING:
    from datetime import datetime
    from pathlib import Path
    from types import TracebackType

logger = logging.getLogger(__name__)

_events_adapter: TypeAdapter[list[EventResponse]] = TypeAdapter(list[EventResponse])


class ToilApiError(Exception):
    """Non-2xx response from the TOIL API."""

    def __init__(self, status_code: int, error: str, detail: str | None = None) -> None:
        self.status_code = status_code
        self.error = error
        self.detail = detail
        super().__init__(f"{status_code} {error}: {detail}")

    @classmethod
    def from_response(cls, response: httpx.Response) -> ToilApiError:
        try:
            body = response.json()
        except ValueError:
            return cls(response.status_code, "HTTPError", response.text or None)
        return cls(response.status_code, body.get("error", "HTTPError"), body.get("detail"))


class ToilApiClient:
    """Thin async wrapper over the TOIL HTTP API for one authenticated user."""

    def __init__(
        self,
        user_id: str,
        base_url: str = "http://localhost:8000",
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 10.0,
    ) -> None:
        self.user_id = user_id
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={"X-User-Id": user_id},
            transport=transport,
            timeout=timeout,
        )

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        response = await self._client.request(method, path, **kwargs)
        if response.is_error:
            raise ToilApiError.from_response(response)
        return response.json()

    async def list_events(self) -> list[EventResponse]:
        data = await self._request("GET", "/events")
        return EventListResponse.model_validate(data).items

    async def create_event(self, payload: CreateEventPayload) -> EventResponse:
        data = await self._request("POST", "/events", json=payload.model_dump(mode="json", exclude_none=True))
        return EventResponse.model_validate(data)

    async def update_event(self, event_id: uuid.UUID, payload: UpdateEventPayload) -> EventResponse:
        data = await self._request(
            "PATCH", f"/events/{event_id}", json=payload.model_dump(mode="json", exclude_unset=True)
        )
        return EventResponse.model_validate(data)

    async def delete_event(self, event_id: uuid.UUID) -> None:
        await self._request("DELETE", f"/events/{event_id}")

    async def get_balance(self) -> BalanceResponse:
        return BalanceResponse.model_validate(await self._request("GET", "/balance"))

    async def get_role(self) -> UserRole:
        return RoleResponse.model_validate(await self._request("GET", "/users/me/role")).role

    async def list_pending(self) -> PendingEventListResponse:
        return PendingEventListResponse.model_validate(await self._request("GET", "/events/pending"))

    async def approve_event(self, event_id: uuid.UUID) -> EventResponse:
        return EventResponse.model_validate(await self._request("POST", f"/events/{event_id}/approve"))

    async def reject_event(self, event_id: uuid.UUID) -> EventResponse:
        return EventResponse.model_validate(await self._request("POST", f"/events/{event_id}/reject"))


class EventCache:
    """Session-local copy of the user's events, optionally mirrored to a JSON file.

    The in-memory list is authoritative for the running session; a failed
    file write is logged and otherwise ignored.
    """

    def __init__(self, api: ToilApiClient, path: Path | None = None) -> None:
        self._api = api
        self._path = path
        self._events: list[EventResponse] = []
        self._tentative: set[uuid.UUID] = set()
        # Server-reported balance from the last refresh; dropped on any local change.
        self._server_balance: BalanceResponse | None = None

    @property
    def events(self) -> list[EventResponse]:
        return list(self._events)

    @property
    def balance(self) -> BalanceResponse:
        """The server's balance as of the last refresh, or one derived from local events since."""
        if self._server_balance is not None:
            return self._server_balance
        return calculate_balance(self._events)

    def is_tentative(self, event_id: uuid.UUID) -> bool:
        return event_id in self._tentative

    def load(self) -> None:
        """Populate from the cache file, if there is a readable one."""
        if self._path is None or not self._path.exists():
            return
        try:
            self._events = _events_adapter.validate_json(self._path.read_bytes())
        except (OSError, PydanticValidationError):
            logger.warning("Ignoring unreadable event cache at %s", self._path, exc_info=True)
            self._events = []
        self._server_balance = None

    async def refresh(self) -> None:
        """Replace local state with the server's list and balance."""
        events = await self._api.list_events()
        balance = await self._api.get_balance()
        self._events = events
        self._server_balance = balance
        self._tentative.clear()
        self._persist()

    async def add_event(
        self,
        event_type: EventType,
        minutes: int,
        note: str | None = None,
        timestamp: datetime | None = None,
    ) -> EventResponse:
        """Log an event, showing it before the server confirms it."""
        payload = CreateEventPayload(timestamp=timestamp or utc_now(), type=event_type, minutes=minutes, note=note)
        tentative = EventResponse(
            id=uuid.uuid4(),
            owner_id=self._api.user_id,
            timestamp=payload.timestamp,
            type=payload.type,
            minutes=payload.minutes,
            note=payload.note,
            status=EventStatus.PENDING,
            approved_by=None,
            approval_timestamp=None,
            created_at=utc_now(),
        )
        self._events.insert(0, tentative)
        self._tentative.add(tentative.id)
        self._changed()

        try:
            created = await self._api.create_event(payload)
        except Exception:
            self._events = [e for e in self._events if e.id != tentative.id]
            self._tentative.discard(tentative.id)
            self._changed()
            raise

        self._events = [created if e.id == tentative.id else e for e in self._events]
        self._tentative.discard(tentative.id)
        self._changed()
        return created

    async def add_span(
        self,
        event_type: EventType,
        start: datetime,
        end: datetime,
        note: str | None = None,
    ) -> EventResponse:
        """Log the time between ``start`` and ``end``, floored to 5-minute steps."""
        minutes = snap_to_five_minutes(int((end - start).total_seconds()) // 60)
        if minutes <= 0:
            msg = "Span must cover at least 5 minutes"
            raise ValueError(msg)
        return await self.add_event(event_type, minutes, note=note, timestamp=start)

    async def delete_event(self, event_id: uuid.UUID) -> None:
        """Undo an event locally, restoring it if the server refuses."""
        previous = list(self._events)
        self._events = [e for e in self._events if e.id != event_id]
        self._changed()
        try:
            await self._api.delete_event(event_id)
        except Exception:
            self._events = previous
            self._changed()
            raise

    async def update_event(self, event_id: uuid.UUID, payload: UpdateEventPayload) -> EventResponse:
        """Apply a correction locally, then adopt the server's version of the event."""
        previous = list(self._events)
        changes = payload.model_dump(exclude_unset=True)
        self._events = [e.model_copy(update=changes) if e.id == event_id else e for e in self._events]
        self._changed()
        try:
            updated = await self._api.update_event(event_id, payload)
        except Exception:
            self._events = previous
            self._changed()
            raise

        self._events = [updated if e.id == event_id else e for e in previous]
        self._changed()
        return updated

    def _changed(self) -> None:
        self._server_balance = None
        self._persist()

    def _persist(self) -> None:
        if self._path is None:
            return
        try:
            self._path.write_bytes(_events_adapter.dump_json(self._events))
        except OSError:
            logger.warning("Failed to write event cache to %s", self._path, exc_info=True)
