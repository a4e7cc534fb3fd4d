"""Prompt template CRUD and favorites."""

from __future__ import annotations

import uuid
from collections.abc import Sequence

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from prompthub.common.errors import AuthorizationError, NotFoundError, ValidationError
from prompthub.core.prompts.template import extract_variables
from prompthub.models.group import Subgroup
from prompthub.models.prompt import Favorite, Prompt
from prompthub.models.user import User
from prompthub.schemas.prompts import (
    CreatorInfo,
    DocumentInfo,
    FavoriteResponse,
    PromptInfo,
    PromptListResponse,
    PromptPayload,
)
from prompthub.services.documents import DocumentStore, UploadedDocument

logger = structlog.stdlib.get_logger()


class PromptService:
    def __init__(self, db: AsyncSession, documents: DocumentStore | None = None) -> None:
        self.db = db
        self.documents = documents

    async def list_prompts(
        self,
        subgroup_id: uuid.UUID | None = None,
        offset: int = 0,
        limit: int = 50,
    ) -> PromptListResponse:
        count_query = select(func.count(Prompt.id))
        query = select(Prompt).order_by(Prompt.created_at.desc())
        if subgroup_id is not None:
            count_query = count_query.where(Prompt.subgroup_id == subgroup_id)
            query = query.where(Prompt.subgroup_id == subgroup_id)

        total = (await self.db.execute(count_query)).scalar_one()
        result = await self.db.execute(query.offset(offset).limit(limit))
        return PromptListResponse(
            prompts=[self._to_info(p) for p in result.scalars().all()],
            total=total,
        )

    async def get_model(self, prompt_id: uuid.UUID) -> Prompt:
        prompt = await self.db.get(Prompt, prompt_id)
        if prompt is None:
            raise NotFoundError(f"Prompt not found: {prompt_id}")
        return prompt

    async def get_prompt(self, prompt_id: uuid.UUID) -> PromptInfo:
        return self._to_info(await self.get_model(prompt_id))

    async def create_prompt(
        self,
        payload: PromptPayload,
        user: User,
        documents: Sequence[UploadedDocument] = (),
    ) -> PromptInfo:
        subgroup = await self._require_subgroup(payload.subgroup_id)
        metadata, stored = await self._store_documents(None, documents)

        prompt = Prompt(
            title=payload.title,
            prompt_text=payload.prompt_text,
            notes=payload.notes,
            subgroup_id=subgroup.id,
            group_id=subgroup.group_id,
            creator=user,
            favorites_count=0,
            prompt_metadata=metadata,
        )
        self.db.add(prompt)
        await self._flush(stored)

        await logger.ainfo(
            "prompt.created",
            prompt_id=str(prompt.id),
            user_id=str(user.id),
            documents=len(documents),
        )
        return self._to_info(prompt)

    async def update_prompt(
        self,
        prompt_id: uuid.UUID,
        payload: PromptPayload,
        user: User,
        documents: Sequence[UploadedDocument] = (),
    ) -> PromptInfo:
        prompt = await self.get_model(prompt_id)
        self._require_owner(prompt, user)

        if payload.subgroup_id != prompt.subgroup_id:
            subgroup = await self._require_subgroup(payload.subgroup_id)
            prompt.subgroup_id = subgroup.id
            prompt.group_id = subgroup.group_id

        prompt.title = payload.title
        prompt.prompt_text = payload.prompt_text
        prompt.notes = payload.notes
        stored: list[DocumentInfo] = []
        if documents:
            prompt.prompt_metadata, stored = await self._store_documents(
                prompt.prompt_metadata, documents
            )

        await self._flush(stored)
        await logger.ainfo("prompt.updated", prompt_id=str(prompt.id), user_id=str(user.id))
        return self._to_info(prompt)

    async def delete_prompt(self, prompt_id: uuid.UUID, user: User) -> None:
        prompt = await self.get_model(prompt_id)
        self._require_owner(prompt, user)

        await self.db.delete(prompt)
        await self.db.flush()
        await logger.ainfo("prompt.deleted", prompt_id=str(prompt_id), user_id=str(user.id))

    # Favorites

    async def favorite(self, prompt_id: uuid.UUID, user: User) -> FavoriteResponse:
        prompt = await self.get_model(prompt_id)
        if await self._find_favorite(prompt_id, user.id) is None:
            self.db.add(Favorite(user_id=user.id, prompt_id=prompt_id))
            prompt.favorites_count += 1
            await self.db.flush()
        return FavoriteResponse(
            prompt_id=prompt_id, favorited=True, favorites_count=prompt.favorites_count
        )

    async def unfavorite(self, prompt_id: uuid.UUID, user: User) -> FavoriteResponse:
        prompt = await self.get_model(prompt_id)
        favorite = await self._find_favorite(prompt_id, user.id)
        if favorite is not None:
            await self.db.delete(favorite)
            prompt.favorites_count = max(0, prompt.favorites_count - 1)
            await self.db.flush()
        return FavoriteResponse(
            prompt_id=prompt_id, favorited=False, favorites_count=prompt.favorites_count
        )

    async def _find_favorite(self, prompt_id: uuid.UUID, user_id: uuid.UUID) -> Favorite | None:
        result = await self.db.execute(
            select(Favorite).where(Favorite.prompt_id == prompt_id, Favorite.user_id == user_id)
        )
        return result.scalar_one_or_none()

    # Helpers

    async def _require_subgroup(self, subgroup_id: uuid.UUID) -> Subgroup:
        subgroup = await self.db.get(Subgroup, subgroup_id)
        if subgroup is None:
            raise ValidationError(
                f"Subgroup does not exist: {subgroup_id}",
                details={"subgroup_id": str(subgroup_id)},
            )
        return subgroup

    @staticmethod
    def _require_owner(prompt: Prompt, user: User) -> None:
        if prompt.created_by_id != user.id and not user.is_admin:
            raise AuthorizationError("Only the prompt's creator or an admin can change it")

    async def _store_documents(
        self,
        metadata: dict | None,
        documents: Sequence[UploadedDocument],
    ) -> tuple[dict | None, list[DocumentInfo]]:
        if not documents:
            return metadata, []
        if self.documents is None:
            raise ValidationError("Document uploads are not enabled")

        stored = await self.documents.save_all(documents)
        existing = list((metadata or {}).get("documents", []))
        # New dict so the JSON column registers the change
        return {
            **(metadata or {}),
            "documents": existing + [d.model_dump() for d in stored],
        }, stored

    async def _flush(self, stored: list[DocumentInfo]) -> None:
        try:
            await self.db.flush()
        except SQLAlchemyError:
            if stored and self.documents is not None:
                await self.documents.discard(stored)
            raise

    @staticmethod
    def _to_info(p: Prompt) -> PromptInfo:
        creator = None
        if p.creator is not None:
            creator = CreatorInfo(id=p.creator.id, name=p.creator.name, email=p.creator.email)
        return PromptInfo(
            id=p.id,
            title=p.title,
            prompt_text=p.prompt_text,
            notes=p.notes,
            subgroup_id=p.subgroup_id,
            group_id=p.group_id,
            user_id=p.created_by_id,
            creator=creator,
            favorites_count=p.favorites_count,
            variables=extract_variables(p.prompt_text),
            metadata=p.prompt_metadata,
            created_at=p.created_at,
            updated_at=p.updated_at,
        )
