from __future__ import annotations

from typing import Self

from pydantic import BaseModel, Field, model_validator

from app.models.enums import UserRole


class RegisterUserPayload(BaseModel):
    """Request body for registering or updating the caller's profile."""

    name: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")


class UserResponse(BaseModel):
    """Response schema for a user in the directory."""

    id: str
    name: str
    email: str
    role: UserRole


class RoleResponse(BaseModel):
    """The caller's role."""

    role: UserRole


class SetRolePayload(BaseModel):
    """Change a user's role. Identify the target by exactly one of user_id or email."""

    user_id: str | None = Field(default=None, min_length=1, max_length=255)
    email: str | None = Field(default=None, min_length=3, max_length=255)
    role: UserRole

    @model_validator(mode="after")
    def _validate_target(self) -> Self:
        if (self.user_id is None) == (self.email is None):
            msg = "Provide exactly one of user_id or email"
            raise ValueError(msg)
        return self


class SetRoleResponse(BaseModel):
    """Result of a role change."""

    success: bool
    user_id: str
    role: UserRole
