"""Signup, login and session schemas."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, Field


def _normalise_email(value: str) -> str:
    value = value.strip().lower()
    local, _, domain = value.partition("@")
    if not local or not domain:
        raise ValueError("Invalid email address")
    return value


Email = Annotated[str, Field(max_length=320), AfterValidator(_normalise_email)]


class SignupRequest(BaseModel):
    email: Email
    password: str = Field(..., min_length=8, max_length=256)
    name: str | None = Field(None, max_length=255)


class LoginRequest(BaseModel):
    email: Email
    password: str = Field(..., max_length=256)


class PasswordResetRequest(BaseModel):
    email: Email


class UserInfo(BaseModel):
    id: uuid.UUID
    email: str
    name: str | None
    role: str
    created_at: datetime


class LoginResponse(BaseModel):
    """Returned ONCE. The raw token is never retrievable again."""

    token: str
    token_prefix: str
    expires_at: datetime
    user: UserInfo


class MessageResponse(BaseModel):
    message: str
