"""User administration endpoints."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Query

from prompthub.api.deps import AdminUser, DBSession
from prompthub.schemas.auth import UserInfo
from prompthub.schemas.users import UpdateRoleRequest, UserListResponse
from prompthub.services.user_service import UserService

router = APIRouter()


@router.get(
    "",
    response_model=UserListResponse,
    summary="List users",
)
async def list_users(
    admin: AdminUser,
    db: DBSession,
    offset: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
) -> UserListResponse:
    return await UserService(db).list_users(offset=offset, limit=limit)


@router.put(
    "/{user_id}/role",
    response_model=UserInfo,
    summary="Change a user's role",
)
async def update_role(
    user_id: uuid.UUID,
    body: UpdateRoleRequest,
    admin: AdminUser,
    db: DBSession,
) -> UserInfo:
    return await UserService(db).update_role(admin, user_id, body.role)
