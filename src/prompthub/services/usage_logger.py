"""
Append-only run log.

Every write happens in a session of its own so a logging failure can never
roll back or hide the caller's work.
"""

from __future__ import annotations

import uuid
from datetime import date

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from prompthub.common.errors import StorageError
from prompthub.db.session import Database
from prompthub.models.run_log import RunLog
from prompthub.schemas.runs import RunLogInfo, RunLogListResponse

logger = structlog.stdlib.get_logger()


class UsageLogger:
    def __init__(self, database: Database) -> None:
        self.database = database

    async def record(self, entry: RunLog) -> RunLog:
        """Insert one run log entry. Raises StorageError on any database failure."""
        try:
            async with self.database.session() as session:
                session.add(entry)
                await session.flush()
        except SQLAlchemyError as e:
            raise StorageError(
                "Failed to record run log entry",
                details={"prompt_id": str(entry.prompt_id) if entry.prompt_id else None},
            ) from e

        await logger.adebug("run.logged", run_id=str(entry.id), status=entry.status.value)
        return entry

    async def count_by_user(self, user_id: uuid.UUID) -> int:
        async with self.database.session() as session:
            result = await session.execute(
                select(func.count(RunLog.id)).where(RunLog.user_id == user_id)
            )
            return result.scalar_one()

    async def list_for_user(
        self, user_id: uuid.UUID, offset: int = 0, limit: int = 50
    ) -> RunLogListResponse:
        return await self._list(RunLog.user_id == user_id, offset, limit)

    async def list_all(self, offset: int = 0, limit: int = 50) -> RunLogListResponse:
        return await self._list(None, offset, limit)

    async def run_dates(self, user_id: uuid.UUID) -> set[date]:
        """Distinct UTC days on which the user ran a prompt."""
        async with self.database.session() as session:
            result = await session.execute(
                select(RunLog.started_at).where(RunLog.user_id == user_id)
            )
            return {started_at.date() for started_at in result.scalars().all()}

    async def _list(self, condition, offset: int, limit: int) -> RunLogListResponse:
        count_query = select(func.count(RunLog.id))
        query = select(RunLog).order_by(RunLog.started_at.desc())
        if condition is not None:
            count_query = count_query.where(condition)
            query = query.where(condition)

        async with self.database.session() as session:
            total = (await session.execute(count_query)).scalar_one()
            result = await session.execute(query.offset(offset).limit(limit))
            return RunLogListResponse(
                runs=[self._to_info(r) for r in result.scalars().all()],
                total=total,
            )

    @staticmethod
    def _to_info(r: RunLog) -> RunLogInfo:
        return RunLogInfo(
            id=r.id,
            prompt_id=r.prompt_id,
            prompt_title=r.prompt_title,
            user_id=r.user_id,
            config_name=r.config_name,
            model=r.model,
            input_data=r.input_data,
            output_data=r.output_data,
            status=r.status.value,
            started_at=r.started_at,
            ended_at=r.ended_at,
            duration_ms=r.duration_ms,
            created_at=r.created_at,
        )
