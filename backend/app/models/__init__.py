from sqlmodel import SQLModel

from app.models.audit import AuditLog
from app.models.base import TimestampMixin, UUIDBase
from app.models.enums import AuditAction, AuditEntityType, EventStatus, EventType, UserRole
from app.models.event import ToilEvent

__all__ = [
    "AuditAction",
    "AuditEntityType",
    "AuditLog",
    "EventStatus",
    "EventType",
    "SQLModel",
    "TimestampMixin",
    "ToilEvent",
    "UUIDBase",
    "UserRole",
]
