"""
Shared test fixtures.

Uses an in-memory SQLite database for unit/integration tests.
For full PostgreSQL tests, point PROMPTHUB_DATABASE__URL at a real server.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from factories import create_test_token, create_test_user
from prompthub.app import create_app
from prompthub.config import Settings, get_settings
from prompthub.db.session import Database
from prompthub.models.base import Base
from prompthub.models.user import User, UserRole
from prompthub.providers.registry import close_http_client

ADMIN_EMAIL = "admin@example.com"


# Test Settings Override

def make_test_settings(upload_dir: Path) -> Settings:
    return Settings(
        env="test",
        database={"url": "sqlite+aiosqlite:///:memory:"},  # type: ignore[arg-type]
        auth={"admin_emails": [ADMIN_EMAIL], "password_iterations": 1_000},  # type: ignore[arg-type]
        logging={"level": "DEBUG", "format": "console"},  # type: ignore[arg-type]
        llm={"timeout_seconds": 5, "connect_timeout_seconds": 1},  # type: ignore[arg-type]
        uploads={"directory": str(upload_dir), "max_bytes": 1024},  # type: ignore[arg-type]
    )


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return make_test_settings(tmp_path / "uploads")


@pytest.fixture(autouse=True)
async def _shared_http_client() -> AsyncIterator[None]:
    yield
    # The shared client must not outlive the test's event loop
    await close_http_client()


# Database Fixtures

@pytest.fixture
async def test_engine() -> AsyncIterator[AsyncEngine]:
    # One shared connection, otherwise every session sees its own empty database
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def database(test_engine: AsyncEngine) -> Database:
    return Database.from_engine(test_engine)


@pytest.fixture
async def db_session(test_engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    session_factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


# App + Client Fixtures

@pytest.fixture
async def app(database: Database, settings: Settings) -> FastAPI:
    application = create_app()
    # ASGITransport does not run the lifespan
    application.state.database = database
    application.state.settings = settings
    application.dependency_overrides[get_settings] = lambda: settings
    return application


@pytest.fixture
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


# Users

@pytest.fixture
async def user(db_session: AsyncSession) -> User:
    u = create_test_user(email="member@example.com")
    db_session.add(u)
    await db_session.commit()
    return u


@pytest.fixture
async def admin_user(db_session: AsyncSession) -> User:
    u = create_test_user(email=ADMIN_EMAIL, role=UserRole.ADMIN)
    db_session.add(u)
    await db_session.commit()
    return u


async def _headers_for(db_session: AsyncSession, u: User) -> dict[str, str]:
    raw_token, token = create_test_token(u.id)
    db_session.add(token)
    await db_session.commit()
    return {"Authorization": f"Bearer {raw_token}"}


@pytest.fixture
async def user_headers(db_session: AsyncSession, user: User) -> dict[str, str]:
    """Headers with a member's session token."""
    return await _headers_for(db_session, user)


@pytest.fixture
async def admin_headers(db_session: AsyncSession, admin_user: User) -> dict[str, str]:
    """Headers with an admin's session token."""
    return await _headers_for(db_session, admin_user)
