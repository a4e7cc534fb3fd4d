"""
FastAPI dependency injection.

Central place for all shared dependencies used across routes.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from prompthub.common.errors import AuthenticationError, AuthorizationError
from prompthub.config import Settings, get_settings
from prompthub.db.session import get_database, get_db_session
from prompthub.models.user import User
from prompthub.providers.gateway import LLMGateway
from prompthub.services.auth_service import AuthService
from prompthub.services.usage_logger import UsageLogger

# Type aliases for cleaner signatures
DBSession = Annotated[AsyncSession, Depends(get_db_session)]
AppSettings = Annotated[Settings, Depends(get_settings)]


def bearer_token(authorization: str | None) -> str | None:
    """Extract the token from ``Authorization: Bearer <token>``."""
    if not authorization:
        return None

    parts = authorization.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1].strip():
        raise AuthenticationError("Invalid Authorization header format. Expected: Bearer <token>")
    return parts[1].strip()


async def get_optional_user(
    db: DBSession,
    settings: AppSettings,
    authorization: Annotated[str | None, Header()] = None,
) -> User | None:
    """
    Resolve the session user if a token was sent.

    A missing header means an anonymous caller; a bad token is still a 401.
    """
    token = bearer_token(authorization)
    if token is None:
        return None
    return await AuthService(db, settings.auth).authenticate(token)


async def get_current_user(
    user: Annotated[User | None, Depends(get_optional_user)],
) -> User:
    if user is None:
        raise AuthenticationError("Missing Authorization header")
    return user


async def require_admin(
    user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Dependency that requires the admin role."""
    if not user.is_admin:
        raise AuthorizationError("Admin access required")
    return user


def get_usage_logger(request: Request) -> UsageLogger:
    return UsageLogger(get_database(request))


def get_gateway(settings: AppSettings) -> LLMGateway:
    return LLMGateway(settings.llm)


# Annotated types for route signatures
OptionalUser = Annotated[User | None, Depends(get_optional_user)]
CurrentUser = Annotated[User, Depends(get_current_user)]
AdminUser = Annotated[User, Depends(require_admin)]
RunLogger = Annotated[UsageLogger, Depends(get_usage_logger)]
Gateway = Annotated[LLMGateway, Depends(get_gateway)]
