from __future__ import annotations

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from app.models.enums import EventType, UserRole
from app.models.event import MINUTES_MAX
from app.schemas.event import CreateEventPayload, UpdateEventPayload
from app.schemas.user import RegisterUserPayload, SetRolePayload

# ---------------------------------------------------------------------------
# CreateEventPayload
# ---------------------------------------------------------------------------


def test_create_payload_valid() -> None:
    payload = CreateEventPayload.model_validate(
        {"timestamp": "2025-03-01T09:00:00+02:00", "type": "ADD", "minutes": 90, "note": "Release"}
    )
    assert payload.type == EventType.ADD
    assert payload.minutes == 90
    assert payload.timestamp == datetime(2025, 3, 1, 7, 0, tzinfo=UTC)


def test_create_payload_naive_timestamp_is_utc() -> None:
    payload = CreateEventPayload.model_validate({"timestamp": "2025-03-01T09:00:00", "type": "TAKE", "minutes": 5})
    assert payload.timestamp.tzinfo == UTC


@pytest.mark.parametrize("minutes", [0, -15])
def test_create_payload_rejects_non_positive_minutes(minutes: int) -> None:
    with pytest.raises(ValidationError):
        CreateEventPayload.model_validate({"timestamp": "2025-03-01T09:00:00Z", "type": "ADD", "minutes": minutes})


def test_create_payload_rejects_fractional_minutes() -> None:
    with pytest.raises(ValidationError):
        CreateEventPayload.model_validate({"timestamp": "2025-03-01T09:00:00Z", "type": "ADD", "minutes": 12.5})


def test_create_payload_minutes_upper_bound() -> None:
    body = {"timestamp": "2025-03-01T09:00:00Z", "type": "ADD", "minutes": MINUTES_MAX}
    assert CreateEventPayload.model_validate(body).minutes == MINUTES_MAX
    with pytest.raises(ValidationError):
        CreateEventPayload.model_validate({**body, "minutes": MINUTES_MAX + 1})


@pytest.mark.parametrize("minutes", [True, "90"])
def test_create_payload_rejects_non_integer_minutes(minutes: object) -> None:
    with pytest.raises(ValidationError):
        CreateEventPayload.model_validate({"timestamp": "2025-03-01T09:00:00Z", "type": "ADD", "minutes": minutes})


def test_create_payload_rejects_timestamp_outside_utc_range() -> None:
    with pytest.raises(ValidationError, match="timestamp out of range"):
        CreateEventPayload.model_validate({"timestamp": "0001-01-01T00:30:00+01:00", "type": "ADD", "minutes": 10})


def test_create_payload_rejects_unknown_type() -> None:
    with pytest.raises(ValidationError):
        CreateEventPayload.model_validate({"timestamp": "2025-03-01T09:00:00Z", "type": "GIFT", "minutes": 10})


def test_create_payload_rejects_unparseable_timestamp() -> None:
    with pytest.raises(ValidationError):
        CreateEventPayload.model_validate({"timestamp": "last tuesday", "type": "ADD", "minutes": 10})


def test_create_payload_note_length() -> None:
    CreateEventPayload.model_validate(
        {"timestamp": "2025-03-01T09:00:00Z", "type": "ADD", "minutes": 10, "note": "x" * 200}
    )
    with pytest.raises(ValidationError):
        CreateEventPayload.model_validate(
            {"timestamp": "2025-03-01T09:00:00Z", "type": "ADD", "minutes": 10, "note": "x" * 201}
        )


def test_create_payload_blank_note_becomes_none() -> None:
    payload = CreateEventPayload.model_validate(
        {"timestamp": "2025-03-01T09:00:00Z", "type": "ADD", "minutes": 10, "note": ""}
    )
    assert payload.note is None


# ---------------------------------------------------------------------------
# UpdateEventPayload
# ---------------------------------------------------------------------------


def test_update_payload_tracks_only_sent_fields() -> None:
    payload = UpdateEventPayload.model_validate({"minutes": 45})
    assert payload.model_dump(exclude_unset=True) == {"minutes": 45}


def test_update_payload_allows_clearing_note() -> None:
    payload = UpdateEventPayload.model_validate({"note": None})
    assert payload.model_dump(exclude_unset=True) == {"note": None}


@pytest.mark.parametrize("field", ["timestamp", "type", "minutes"])
def test_update_payload_rejects_null_for_required_fields(field: str) -> None:
    with pytest.raises(ValidationError):
        UpdateEventPayload.model_validate({field: None})


def test_update_payload_rejects_non_editable_fields() -> None:
    with pytest.raises(ValidationError):
        UpdateEventPayload.model_validate({"status": "APPROVED"})
    with pytest.raises(ValidationError):
        UpdateEventPayload.model_validate({"owner_id": "someone-else"})


def test_update_payload_rejects_zero_minutes() -> None:
    with pytest.raises(ValidationError):
        UpdateEventPayload.model_validate({"minutes": 0})


@pytest.mark.parametrize("minutes", [False, "90", MINUTES_MAX + 1])
def test_update_payload_rejects_invalid_minutes(minutes: object) -> None:
    with pytest.raises(ValidationError):
        UpdateEventPayload.model_validate({"minutes": minutes})


def test_update_payload_rejects_timestamp_outside_utc_range() -> None:
    with pytest.raises(ValidationError, match="timestamp out of range"):
        UpdateEventPayload.model_validate({"timestamp": "9999-12-31T23:30:00-01:00"})


# ---------------------------------------------------------------------------
# User payloads
# ---------------------------------------------------------------------------


def test_register_payload_requires_email_shape() -> None:
    RegisterUserPayload.model_validate({"name": "Uma", "email": "uma@example.com"})
    with pytest.raises(ValidationError):
        RegisterUserPayload.model_validate({"name": "Uma", "email": "not-an-email"})


def test_set_role_payload_by_user_id() -> None:
    payload = SetRolePayload.model_validate({"user_id": "user-1", "role": "manager"})
    assert payload.role == UserRole.MANAGER
    assert payload.email is None


def test_set_role_payload_by_email() -> None:
    payload = SetRolePayload.model_validate({"email": "uma@example.com", "role": "user"})
    assert payload.user_id is None


def test_set_role_payload_requires_exactly_one_target() -> None:
    with pytest.raises(ValidationError):
        SetRolePayload.model_validate({"role": "manager"})
    with pytest.raises(ValidationError):
        SetRolePayload.model_validate({"user_id": "user-1", "email": "uma@example.com", "role": "manager"})


def test_set_role_payload_rejects_unknown_role() -> None:
    with pytest.raises(ValidationError):
        SetRolePayload.model_validate({"user_id": "user-1", "role": "admin"})
