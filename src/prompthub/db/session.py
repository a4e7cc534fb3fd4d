"""Async database handle and session dependency."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from prompthub.config import DatabaseSettings


class Database:
    """
    Owns the engine and session factory.

    Constructed explicitly and opened/closed by the application lifespan;
    components receive it (or sessions from it) instead of importing a
    module-level engine.
    """

    def __init__(self, settings: DatabaseSettings, **engine_kwargs) -> None:
        self.settings = settings
        self._engine_kwargs = engine_kwargs
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @classmethod
    def from_engine(cls, engine: AsyncEngine) -> Database:
        """Wrap an engine created elsewhere (tests, scripts)."""
        db = cls(DatabaseSettings(url=str(engine.url)))
        db._engine = engine
        db._session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
        return db

    def open(self) -> None:
        if self._engine is not None:
            return
        kwargs = dict(echo=self.settings.echo, pool_pre_ping=True)
        if not self.settings.url.startswith("sqlite"):
            kwargs.update(
                pool_size=self.settings.pool_size,
                max_overflow=self.settings.max_overflow,
                pool_recycle=300,
            )
        kwargs.update(self._engine_kwargs)
        self._engine = create_async_engine(self.settings.url, **kwargs)
        self._session_factory = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
        self._engine = None
        self._session_factory = None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("Database is not open")
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        if self._session_factory is None:
            raise RuntimeError("Database is not open")
        return self._session_factory

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Yield a session that commits on success and rolls back on error."""
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def create_all(self) -> None:
        from prompthub.models import Base

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)


def get_database(request: Request) -> Database:
    return request.app.state.database


async def get_db_session(request: Request) -> AsyncIterator[AsyncSession]:
    """FastAPI dependency that yields an async DB session."""
    async with get_database(request).session() as session:
        yield session
