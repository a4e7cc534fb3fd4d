"""Per-user statistics: counts from storage, levels from core.stats."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from prompthub.core.stats.levels import current_streak, level_info
from prompthub.models.prompt import Favorite, Prompt
from prompthub.schemas.stats import UserStatsSnapshot
from prompthub.services.usage_logger import UsageLogger


class StatsService:
    def __init__(self, db: AsyncSession, usage_logger: UsageLogger) -> None:
        self.db = db
        self.usage_logger = usage_logger

    async def for_user(self, user_id: uuid.UUID) -> UserStatsSnapshot:
        runs = await self.usage_logger.count_by_user(user_id)

        created_result = await self.db.execute(
            select(func.count(Prompt.id)).where(Prompt.created_by_id == user_id)
        )
        created = created_result.scalar_one()

        # Favorites other users (or the creator) put on this user's prompts
        favorites_result = await self.db.execute(
            select(func.count(Favorite.id))
            .join(Prompt, Prompt.id == Favorite.prompt_id)
            .where(Prompt.created_by_id == user_id)
        )
        favorites_received = favorites_result.scalar_one()

        info = level_info(runs, created, favorites_received)
        today = datetime.now(timezone.utc).date()
        streak = current_streak(await self.usage_logger.run_dates(user_id), today)

        return UserStatsSnapshot(
            prompts_run=runs,
            prompts_created=created,
            favorites_received=favorites_received,
            total_points=info.points,
            level=info.level,
            progress=info.progress,
            points_to_next_level=info.points_to_next_level,
            is_max_level=info.is_max_level,
            current_streak_days=streak,
        )
