"""Access control gate for manager-only operations."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from app.exceptions import ForbiddenError
from app.models.enums import UserRole

if TYPE_CHECKING:
    from app.services.user import UserDirectory

logger = logging.getLogger(__name__)

_ROLE_RANK = {UserRole.USER: 0, UserRole.MANAGER: 1}


async def authorize(directory: UserDirectory, user_id: str, required_role: UserRole) -> UserRole:
    """Resolve the caller's role and require it to satisfy ``required_role``.

    Unknown callers are treated exactly like under-privileged ones so that the
    response does not reveal whether an id is registered.
    """
    user = await directory.get_user(user_id)
    if user is None or _ROLE_RANK[user.role] < _ROLE_RANK[required_role]:
        logger.warning("Access denied: user=%s required_role=%s", user_id, required_role.value)
        raise ForbiddenError(f"{required_role.value.capitalize()} access required")
    return user.role
