from __future__ import annotations

from fastapi import APIRouter

from app.api.deps import AuthDep, DirectoryDep, ManagerDep
from app.db import SessionDep
from app.schemas.user import RegisterUserPayload, RoleResponse, SetRolePayload, SetRoleResponse, UserResponse
from app.services import user as user_service

users_router = APIRouter(prefix="/users", tags=["users"])


@users_router.get("/me/role", response_model=RoleResponse)
async def get_my_role(
    auth: AuthDep,
    directory: DirectoryDep,
) -> RoleResponse:
    """Get the caller's role."""
    return await user_service.get_own_role(directory, auth)


@users_router.put("/me", response_model=UserResponse)
async def register_me(
    payload: RegisterUserPayload,
    auth: AuthDep,
    directory: DirectoryDep,
) -> UserResponse:
    """Create or update the caller's profile."""
    return await user_service.register_user(directory, auth, payload)


@users_router.put("/role", response_model=SetRoleResponse)
async def set_role(
    payload: SetRolePayload,
    session: SessionDep,
    auth: ManagerDep,
    directory: DirectoryDep,
) -> SetRoleResponse:
    """Change a user's role by id or email (manager only)."""
    return await user_service.set_user_role(session, directory, auth, payload)
