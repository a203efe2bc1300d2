# ruff: noqa: B008
from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Header

from app.models.enums import UserRole
from app.schemas.auth import AuthContext
from app.services.access import authorize
from app.services.user import UserDirectory, get_user_directory


async def get_auth_context(
    x_user_id: str = Header(min_length=1, max_length=255),
) -> AuthContext:
    """Extract the authenticated caller from request headers."""
    return AuthContext(user_id=x_user_id)


AuthDep = Annotated[AuthContext, Depends(get_auth_context)]
DirectoryDep = Annotated[UserDirectory, Depends(get_user_directory)]


async def require_manager(
    auth: AuthDep,
    directory: DirectoryDep,
) -> AuthContext:
    """Require the caller to hold the manager role before any work is done."""
    await authorize(directory, auth.user_id, UserRole.MANAGER)
    return auth


ManagerDep = Annotated[AuthContext, Depends(require_manager)]
