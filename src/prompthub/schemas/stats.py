"""User statistics schemas."""

from __future__ import annotations

from pydantic import BaseModel


class UserStatsSnapshot(BaseModel):
    prompts_run: int
    prompts_created: int
    favorites_received: int
    total_points: int
    level: int
    progress: int
    points_to_next_level: int | None
    is_max_level: bool
    current_streak_days: int
