from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError

from app.exceptions import NotFoundError
from app.models.enums import AuditAction, AuditEntityType, UserRole
from app.schemas.user import RoleResponse, SetRoleResponse, UserResponse
from app.services.audit import write_audit_log

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from app.schemas.auth import AuthContext
    from app.schemas.user import RegisterUserPayload, SetRolePayload

logger = logging.getLogger(__name__)


class UserInfo(BaseModel):
    """User record owned by the auth subsystem."""

    id: str
    name: str
    email: str
    role: UserRole = UserRole.USER


@runtime_checkable
class UserDirectory(Protocol):
    """Interface to the auth subsystem's user store."""

    async def get_user(self, user_id: str) -> UserInfo | None:
        """Fetch a user by id. Returns None if not found."""
        ...

    async def get_user_by_email(self, email: str) -> UserInfo | None:
        """Fetch a user by email (case-insensitive). Returns None if not found."""
        ...

    async def upsert_user(self, user_id: str, name: str, email: str) -> UserInfo:
        """Create or update a user's profile, preserving an existing role."""
        ...

    async def set_role(self, user_id: str, role: UserRole) -> UserInfo | None:
        """Change a user's role. Returns None if the user does not exist."""
        ...


class InMemoryUserDirectory:
    """In-memory stub implementation for development and tests."""

    def __init__(self) -> None:
        self._users: dict[str, UserInfo] = {}

    def seed(self, user: UserInfo) -> None:
        """Seed a user for testing."""
        self._users[user.id] = user

    async def get_user(self, user_id: str) -> UserInfo | None:
        return self._users.get(user_id)

    async def get_user_by_email(self, email: str) -> UserInfo | None:
        needle = email.strip().lower()
        for user in self._users.values():
            if user.email.lower() == needle:
                return user
        return None

    async def upsert_user(self, user_id: str, name: str, email: str) -> UserInfo:
        existing = self._users.get(user_id)
        role = existing.role if existing is not None else UserRole.USER
        user = UserInfo(id=user_id, name=name, email=email, role=role)
        self._users[user_id] = user
        return user

    async def set_role(self, user_id: str, role: UserRole) -> UserInfo | None:
        existing = self._users.get(user_id)
        if existing is None:
            return None
        updated = existing.model_copy(update={"role": role})
        self._users[user_id] = updated
        return updated


_user_directory: UserDirectory = InMemoryUserDirectory()


def get_user_directory() -> UserDirectory:
    """FastAPI dependency for the user directory."""
    return _user_directory


def set_user_directory(directory: UserDirectory) -> None:
    """Override the directory (for testing or production wiring)."""
    global _user_directory
    _user_directory = directory


async def seed_managers(directory: UserDirectory, manager_ids: list[str]) -> None:
    """Ensure each configured id exists in the directory with the manager role."""
    for user_id in manager_ids:
        if await directory.get_user(user_id) is None:
            await directory.upsert_user(user_id, name=user_id, email=f"{user_id}@localhost")
        await directory.set_role(user_id, UserRole.MANAGER)


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


def _build_user_response(user: UserInfo) -> UserResponse:
    return UserResponse(id=user.id, name=user.name, email=user.email, role=user.role)


async def get_own_role(directory: UserDirectory, auth: AuthContext) -> RoleResponse:
    """Return the caller's role. Unregistered callers get NotFoundError."""
    user = await directory.get_user(auth.user_id)
    if user is None:
        raise NotFoundError("User not found")
    return RoleResponse(role=user.role)


async def register_user(
    directory: UserDirectory,
    auth: AuthContext,
    payload: RegisterUserPayload,
) -> UserResponse:
    """Create or update the caller's own profile. Never changes the role."""
    user = await directory.upsert_user(auth.user_id, payload.name, payload.email)
    logger.info("User profile registered: user=%s", auth.user_id)
    return _build_user_response(user)


async def set_user_role(
    session: AsyncSession,
    directory: UserDirectory,
    auth: AuthContext,
    payload: SetRolePayload,
) -> SetRoleResponse:
    """Change another user's role. Callers must have passed the manager gate."""
    if payload.user_id is not None:
        target = await directory.get_user(payload.user_id)
    else:
        target = await directory.get_user_by_email(payload.email or "")
    if target is None:
        logger.warning("Role change target not found: manager=%s", auth.user_id)
        raise NotFoundError("User not found")

    before_role = target.role
    updated = await directory.set_role(target.id, payload.role)
    if updated is None:
        raise NotFoundError("User not found")

    # The directory sits outside the database transaction, so an unrecorded
    # change is reverted there by hand.
    write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.USER,
        entity_id=target.id,
        action=AuditAction.ROLE_CHANGE,
        before_json={"role": before_role.value},
        after_json={"role": updated.role.value},
    )
    try:
        await session.commit()
    except SQLAlchemyError:
        await directory.set_role(target.id, before_role)
        logger.warning(
            "Role change reverted, audit write failed: manager=%s user=%s role=%s",
            auth.user_id,
            target.id,
            before_role.value,
        )
        raise

    logger.info(
        "User role updated: manager=%s user=%s %s -> %s",
        auth.user_id,
        target.id,
        before_role.value,
        updated.role.value,
    )
    return SetRoleResponse(success=True, user_id=target.id, role=updated.role)
