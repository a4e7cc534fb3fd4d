"""Storage for documents uploaded alongside prompts."""

from __future__ import annotations

import re
import uuid
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

import structlog

from prompthub.common.errors import StorageError, ValidationError
from prompthub.config import UploadSettings
from prompthub.schemas.prompts import DocumentInfo

logger = structlog.stdlib.get_logger()

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


@dataclass(frozen=True)
class UploadedDocument:
    filename: str
    content_type: str | None
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


class DocumentStore:
    """Writes uploads under ``uploads.directory``, one file per document."""

    def __init__(self, settings: UploadSettings) -> None:
        self.root = Path(settings.directory)
        self.max_bytes = settings.max_bytes

    async def save(self, document: UploadedDocument) -> DocumentInfo:
        self._check_size(document)

        safe_name = _UNSAFE_CHARS.sub("_", Path(document.filename).name).strip("._") or "document"
        path = self.root / f"{uuid.uuid4().hex}-{safe_name}"
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            path.write_bytes(document.content)
        except OSError as e:
            raise StorageError(f"Failed to store '{document.filename}'") from e

        await logger.ainfo("document.stored", path=str(path), size=document.size)
        return DocumentInfo(
            name=document.filename,
            path=str(path),
            size=document.size,
            type=document.content_type,
        )

    async def save_all(self, documents: Sequence[UploadedDocument]) -> list[DocumentInfo]:
        """Store every document or none of them."""
        for document in documents:
            self._check_size(document)

        stored: list[DocumentInfo] = []
        try:
            for document in documents:
                stored.append(await self.save(document))
        except StorageError:
            await self.discard(stored)
            raise
        return stored

    async def discard(self, stored: Sequence[DocumentInfo]) -> None:
        """Remove files written for a change that was not persisted."""
        for info in stored:
            try:
                Path(info.path).unlink(missing_ok=True)
            except OSError as e:
                await logger.awarning("document.discard_failed", path=info.path, error=str(e))
        if stored:
            await logger.ainfo("document.discarded", count=len(stored))

    def _check_size(self, document: UploadedDocument) -> None:
        if document.size > self.max_bytes:
            raise ValidationError(
                f"File '{document.filename}' exceeds the {self.max_bytes} byte limit",
                details={"file": document.filename, "size": document.size},
            )
