"""Signup, login, logout and session endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Header

from prompthub.api.deps import AppSettings, CurrentUser, DBSession, bearer_token
from prompthub.schemas.auth import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    PasswordResetRequest,
    SignupRequest,
    UserInfo,
)
from prompthub.services.auth_service import AuthService, to_user_info

router = APIRouter()


@router.post(
    "/signup",
    response_model=UserInfo,
    status_code=201,
    summary="Create an account",
)
async def signup(body: SignupRequest, db: DBSession, settings: AppSettings) -> UserInfo:
    return await AuthService(db, settings.auth).signup(body)


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Exchange credentials for a session token",
)
async def login(body: LoginRequest, db: DBSession, settings: AppSettings) -> LoginResponse:
    return await AuthService(db, settings.auth).login(body)


@router.post(
    "/logout",
    status_code=204,
    summary="Revoke the current session token",
)
async def logout(
    user: CurrentUser,
    db: DBSession,
    settings: AppSettings,
    authorization: Annotated[str | None, Header()] = None,
) -> None:
    token = bearer_token(authorization)
    if token is not None:
        await AuthService(db, settings.auth).logout(token)


@router.get(
    "/session",
    response_model=UserInfo,
    summary="Current session user",
)
async def session(user: CurrentUser) -> UserInfo:
    return to_user_info(user)


@router.post(
    "/reset-password",
    response_model=MessageResponse,
    summary="Request a password reset",
)
async def reset_password(
    body: PasswordResetRequest,
    db: DBSession,
    settings: AppSettings,
) -> MessageResponse:
    await AuthService(db, settings.auth).request_password_reset(body.email)
    return MessageResponse(
        message="If an account exists for that email, reset instructions have been sent."
    )
