"""Gamification points, levels and progress."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, timedelta

RUN_POINTS = 1
CREATED_POINTS = 5
FAVORITE_POINTS = 3

# Cumulative points needed for levels 1..10
LEVEL_THRESHOLDS: tuple[int, ...] = (0, 20, 50, 100, 200, 500, 1000, 2000, 5000, 10000)
MAX_LEVEL = len(LEVEL_THRESHOLDS)


@dataclass(frozen=True)
class LevelInfo:
    points: int
    level: int
    progress: int
    points_to_next_level: int | None
    is_max_level: bool


def total_points(runs: int, created: int, favorites_received: int) -> int:
    return runs * RUN_POINTS + created * CREATED_POINTS + favorites_received * FAVORITE_POINTS


def level_for(points: int) -> int:
    """Largest 1-based level whose threshold is <= points. Clamps at MAX_LEVEL."""
    level = 1
    for i, threshold in enumerate(LEVEL_THRESHOLDS, start=1):
        if threshold <= points:
            level = i
        else:
            break
    return level


def progress_for(points: int, level: int) -> int:
    """Percent of the way from ``level`` to the next one; 0 at the max level."""
    if level >= MAX_LEVEL:
        return 0
    floor_points = LEVEL_THRESHOLDS[level - 1]
    span = LEVEL_THRESHOLDS[level] - floor_points
    # Integer floor division matches floor(x / span * 100) for non-negative x
    percent = (points - floor_points) * 100 // span
    return max(0, min(100, percent))


def level_info(runs: int, created: int, favorites_received: int) -> LevelInfo:
    points = total_points(runs, created, favorites_received)
    level = level_for(points)
    is_max = level >= MAX_LEVEL
    return LevelInfo(
        points=points,
        level=level,
        progress=progress_for(points, level),
        points_to_next_level=None if is_max else LEVEL_THRESHOLDS[level] - points,
        is_max_level=is_max,
    )


def current_streak(run_days: Iterable[date], today: date) -> int:
    """
    Consecutive days with at least one run, ending today or yesterday.

    A streak that last ran yesterday is still alive until today ends.
    """
    days = set(run_days)
    if today in days:
        cursor = today
    elif today - timedelta(days=1) in days:
        cursor = today - timedelta(days=1)
    else:
        return 0

    streak = 0
    while cursor in days:
        streak += 1
        cursor -= timedelta(days=1)
    return streak
