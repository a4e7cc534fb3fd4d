"""Signup, login and session token lifecycle."""

from __future__ import annotations

from datetime import timedelta

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from prompthub.common.crypto import generate_session_token, hash_password, hash_token, verify_password
from prompthub.common.errors import AuthenticationError, ConflictError
from prompthub.config import AuthSettings
from prompthub.models.auth_token import AuthToken
from prompthub.models.base import utcnow
from prompthub.models.user import User, UserRole
from prompthub.schemas.auth import LoginRequest, LoginResponse, SignupRequest, UserInfo

logger = structlog.stdlib.get_logger()


class AuthService:
    def __init__(self, db: AsyncSession, settings: AuthSettings) -> None:
        self.db = db
        self.settings = settings

    async def signup(self, req: SignupRequest) -> UserInfo:
        result = await self.db.execute(select(User.id).where(User.email == req.email))
        if result.scalar_one_or_none() is not None:
            raise ConflictError("An account with this email already exists")

        role = UserRole.ADMIN if req.email in self.settings.admin_emails else UserRole.USER
        user = User(
            email=req.email,
            name=req.name,
            password_hash=hash_password(req.password, self.settings.password_iterations),
            role=role,
        )
        self.db.add(user)
        await self.db.flush()

        await logger.ainfo("auth.signup", user_id=str(user.id), role=role.value)
        return to_user_info(user)

    async def login(self, req: LoginRequest) -> LoginResponse:
        result = await self.db.execute(select(User).where(User.email == req.email))
        user = result.scalar_one_or_none()

        # Same error for unknown email and wrong password
        if user is None or not verify_password(req.password, user.password_hash):
            await logger.ainfo("auth.login.failed")
            raise AuthenticationError("Invalid email or password")

        raw_token, token_hash, token_prefix = generate_session_token()
        token = AuthToken(
            token_hash=token_hash,
            token_prefix=token_prefix,
            user_id=user.id,
            expires_at=utcnow() + timedelta(hours=self.settings.token_ttl_hours),
        )
        self.db.add(token)
        await self.db.flush()

        await logger.ainfo("auth.login", user_id=str(user.id), token_prefix=token_prefix)
        return LoginResponse(
            token=raw_token,
            token_prefix=token_prefix,
            expires_at=token.expires_at,
            user=to_user_info(user),
        )

    async def authenticate(self, raw_token: str) -> User:
        """Resolve a bearer token to its user, or raise AuthenticationError."""
        now = utcnow()
        result = await self.db.execute(
            select(AuthToken).where(
                AuthToken.token_hash == hash_token(raw_token),
                AuthToken.revoked.is_(False),
                AuthToken.expires_at > now,
            )
        )
        token = result.scalar_one_or_none()
        if token is None:
            raise AuthenticationError("Invalid or expired session token")

        token.last_used_at = now
        return token.user

    async def logout(self, raw_token: str) -> None:
        result = await self.db.execute(
            select(AuthToken).where(AuthToken.token_hash == hash_token(raw_token))
        )
        token = result.scalar_one_or_none()
        if token is not None:
            token.revoked = True
            await self.db.flush()

    async def request_password_reset(self, email: str) -> None:
        """
        Record a reset request without revealing whether the account exists.

        Delivery of reset links is handled outside this service.
        """
        result = await self.db.execute(select(User.id).where(User.email == email))
        user_id = result.scalar_one_or_none()
        await logger.ainfo(
            "auth.password_reset.requested",
            known_account=user_id is not None,
            user_id=str(user_id) if user_id else None,
        )


def to_user_info(user: User) -> UserInfo:
    return UserInfo(
        id=user.id,
        email=user.email,
        name=user.name,
        role=user.role.value,
        created_at=user.created_at,
    )
