from __future__ import annotations

import enum


class EventType(enum.StrEnum):
    """Direction of a TOIL event."""

    ADD = "ADD"
    TAKE = "TAKE"


class EventStatus(enum.StrEnum):
    """Approval state machine for TOIL events. APPROVED and REJECTED are terminal."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class UserRole(enum.StrEnum):
    """Role of a user as reported by the user directory."""

    USER = "user"
    MANAGER = "manager"


class AuditEntityType(enum.StrEnum):
    """Entity type recorded in the audit log."""

    EVENT = "EVENT"
    USER = "USER"


class AuditAction(enum.StrEnum):
    """Action recorded in the audit log."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    ROLE_CHANGE = "ROLE_CHANGE"
