"""Admin user management."""

from __future__ import annotations

import uuid

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from prompthub.common.errors import NotFoundError, ValidationError
from prompthub.models.user import User, UserRole
from prompthub.schemas.auth import UserInfo
from prompthub.schemas.users import UserListResponse
from prompthub.services.auth_service import to_user_info

logger = structlog.stdlib.get_logger()


class UserService:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def list_users(self, offset: int = 0, limit: int = 50) -> UserListResponse:
        count_result = await self.db.execute(select(func.count(User.id)))
        total = count_result.scalar_one()

        result = await self.db.execute(
            select(User).order_by(User.created_at.desc()).offset(offset).limit(limit)
        )
        return UserListResponse(
            users=[to_user_info(u) for u in result.scalars().all()],
            total=total,
        )

    async def update_role(self, caller: User, user_id: uuid.UUID, role: str) -> UserInfo:
        new_role = UserRole(role)
        if caller.id == user_id and new_role != UserRole.ADMIN:
            raise ValidationError("Admins cannot remove their own admin role")

        user = await self.db.get(User, user_id)
        if user is None:
            raise NotFoundError(f"User not found: {user_id}")

        user.role = new_role
        await self.db.flush()

        await logger.ainfo(
            "admin.user.role_updated",
            user_id=str(user_id),
            role=new_role.value,
            by=str(caller.id),
        )
        return to_user_info(user)
