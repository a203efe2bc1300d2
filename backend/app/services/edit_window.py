from __future__ import annotations

from datetime import datetime

from app.exceptions import EditWindowExpiredError
from app.models.base import as_utc, utc_now


def is_within_edit_window(created_at: datetime, now: datetime | None = None) -> bool:
    """True when ``created_at`` falls on the same UTC calendar day as ``now``."""
    current = as_utc(now) if now is not None else utc_now()
    return as_utc(created_at).date() == current.date()


def ensure_within_edit_window(created_at: datetime, now: datetime | None = None) -> None:
    """Raise EditWindowExpiredError unless the event was created today (UTC)."""
    if not is_within_edit_window(created_at, now):
        raise EditWindowExpiredError
