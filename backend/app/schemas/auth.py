from __future__ import annotations

from pydantic import BaseModel, Field


class AuthContext(BaseModel):
    """Dev auth context extracted from request headers."""

    user_id: str = Field(min_length=1, max_length=255)
