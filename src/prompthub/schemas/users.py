"""Admin user management schemas."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel

from prompthub.schemas.auth import UserInfo


class UserListResponse(BaseModel):
    users: list[UserInfo]
    total: int


class UpdateRoleRequest(BaseModel):
    role: Literal["user", "admin"]
