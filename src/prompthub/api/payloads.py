"""
Request bodies that may arrive as JSON or as multipart form data.

The raw request is read once into a ``JsonPayload`` or a ``MultipartPayload``
and then validated into a strict pydantic model; routes never branch on the
content type themselves.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from fastapi import Request
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from starlette.datastructures import UploadFile

from prompthub.common.errors import ValidationError
from prompthub.schemas.prompts import PromptPayload
from prompthub.schemas.runs import RunRequest
from prompthub.services.documents import UploadedDocument

_FORM_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


@dataclass
class JsonPayload:
    data: dict[str, Any]


@dataclass
class MultipartPayload:
    fields: dict[str, str] = field(default_factory=dict)
    files: dict[str, list[UploadedDocument]] = field(default_factory=dict)


RequestPayload = JsonPayload | MultipartPayload


async def read_payload(request: Request, max_bytes: int) -> RequestPayload:
    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()

    if content_type in _FORM_TYPES:
        payload = MultipartPayload()
        form = await request.form()
        try:
            for key, value in form.multi_items():
                if isinstance(value, UploadFile):
                    content = await value.read()
                    if len(content) > max_bytes:
                        raise ValidationError(
                            f"File '{value.filename}' exceeds the {max_bytes} byte limit",
                            details={"field": key},
                        )
                    payload.files.setdefault(key, []).append(
                        UploadedDocument(
                            filename=value.filename or key,
                            content_type=value.content_type,
                            content=content,
                        )
                    )
                else:
                    payload.fields[key] = value
        finally:
            await form.close()
        return payload

    body = await request.body()
    if not body.strip():
        return JsonPayload({})
    try:
        data = json.loads(body)
    except ValueError as e:
        raise ValidationError("Request body must be JSON or multipart/form-data") from e
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return JsonPayload(data)


def _validate(model: type[BaseModel], data: dict[str, Any]) -> Any:
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(
            "Invalid request body",
            details={"errors": e.errors(include_url=False, include_context=False)},
        ) from e


def parse_prompt_payload(payload: RequestPayload) -> tuple[PromptPayload, list[UploadedDocument]]:
    """Validate a create/update body. Multipart uploads go under ``documents``."""
    match payload:
        case JsonPayload(data=data):
            return _validate(PromptPayload, data), []
        case MultipartPayload(fields=fields, files=files):
            return _validate(PromptPayload, fields), files.get("documents", [])


def parse_run_request(payload: RequestPayload) -> RunRequest:
    """
    Validate a run body.

    As multipart, every text field except ``parameters`` is a variable value
    and every uploaded file supplies the value of the variable it is named
    after, decoded as UTF-8. A file wins over a text field of the same name.
    """
    match payload:
        case JsonPayload(data=data):
            return _validate(RunRequest, data)
        case MultipartPayload(fields=fields, files=files):
            variables = {k: v for k, v in fields.items() if k != "parameters"}
            for name, documents in files.items():
                try:
                    variables[name] = documents[-1].content.decode("utf-8")
                except UnicodeDecodeError as e:
                    raise ValidationError(
                        f"File for '{name}' is not valid UTF-8 text",
                        details={"field": name},
                    ) from e

            data: dict[str, Any] = {"variables": variables}
            if fields.get("parameters"):
                try:
                    data["parameters"] = json.loads(fields["parameters"])
                except ValueError as e:
                    raise ValidationError("parameters must be a JSON object") from e
            return _validate(RunRequest, data)
