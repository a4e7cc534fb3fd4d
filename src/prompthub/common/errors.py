"""
Unified error handling.

Every PromptHub error renders as
``{"error": {"message", "type", "code", ...details}}``.
"""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import ORJSONResponse

logger = structlog.stdlib.get_logger()


class PromptHubError(Exception):
    """Base exception for all PromptHub errors."""

    status_code: int = 500
    error_type: str = "internal_error"

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> dict[str, Any]:
        return {
            "error": {
                "message": self.message,
                "type": self.error_type,
                "code": self.status_code,
                **self.details,
            }
        }


class AuthenticationError(PromptHubError):
    status_code = 401
    error_type = "authentication_error"


class AuthorizationError(PromptHubError):
    status_code = 403
    error_type = "authorization_error"


class NotFoundError(PromptHubError):
    status_code = 404
    error_type = "not_found"


class ConflictError(PromptHubError):
    status_code = 409
    error_type = "conflict"


class ValidationError(PromptHubError):
    status_code = 400
    error_type = "invalid_request_error"


class NoActiveConfigurationError(PromptHubError):
    status_code = 503
    error_type = "no_active_configuration"


class GatewayError(PromptHubError):
    """The LLM endpoint failed: non-2xx, network failure or unreadable body."""

    status_code = 502
    error_type = "gateway_error"


class GatewayTimeoutError(GatewayError):
    status_code = 504
    error_type = "gateway_timeout"


class StorageError(PromptHubError):
    status_code = 500
    error_type = "storage_error"


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(PromptHubError)
    async def prompthub_error_handler(request: Request, exc: PromptHubError) -> ORJSONResponse:
        await logger.awarning(
            "prompthub.error",
            error_type=exc.error_type,
            message=exc.message,
            status_code=exc.status_code,
            path=request.url.path,
        )
        return ORJSONResponse(
            status_code=exc.status_code,
            content=exc.to_response(),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> ORJSONResponse:
        await logger.aexception(
            "prompthub.unhandled_error",
            path=request.url.path,
            error=str(exc),
        )
        return ORJSONResponse(
            status_code=500,
            content={
                "error": {
                    "message": "An internal error occurred.",
                    "type": "internal_error",
                    "code": 500,
                }
            },
        )
