"""Integration tests for LLM configuration management and activation."""

from __future__ import annotations

import asyncio
import uuid
from pathlib import Path

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import create_async_engine

from factories import create_test_llm_config
from prompthub.common.errors import ConflictError
from prompthub.db.session import Database
from prompthub.models.base import Base
from prompthub.models.llm_config import LLMConfiguration
from prompthub.services.llm_config_service import LLMConfigService


def _config_body(name: str, **overrides) -> dict:
    body = {
        "config_name": name,
        "api_type": "openai",
        "api_base_url": "https://api.openai.com/v1",
        "api_key_env_var": "OPENAI_API_KEY",
        "model_name": "gpt-4o-mini",
        "default_parameters": {"temperature": 0.3},
    }
    body.update(overrides)
    return body


async def _active_names(client: AsyncClient, headers: dict) -> list[str]:
    resp = await client.get("/admin/v1/llm-configs", headers=headers)
    return [c["config_name"] for c in resp.json()["configs"] if c["is_active"]]


@pytest.mark.integration
class TestLLMConfigLifecycle:
    async def test_create_list_update_delete(
        self, client: AsyncClient, admin_headers: dict
    ) -> None:
        created = await client.post(
            "/admin/v1/llm-configs", headers=admin_headers, json=_config_body("primary")
        )
        assert created.status_code == 201
        data = created.json()
        assert data["is_active"] is False
        assert data["api_key_env_var"] == "OPENAI_API_KEY"
        config_id = data["id"]

        listed = await client.get("/admin/v1/llm-configs", headers=admin_headers)
        assert listed.json()["total"] == 1

        updated = await client.put(
            f"/admin/v1/llm-configs/{config_id}",
            headers=admin_headers,
            json={"model_name": "gpt-4o", "default_parameters": '{"temperature": 0.9}'},
        )
        assert updated.status_code == 200
        assert updated.json()["model_name"] == "gpt-4o"
        assert updated.json()["default_parameters"] == {"temperature": 0.9}

        deleted = await client.delete(f"/admin/v1/llm-configs/{config_id}", headers=admin_headers)
        assert deleted.status_code == 204

    async def test_duplicate_name_conflicts(self, client: AsyncClient, admin_headers: dict) -> None:
        await client.post("/admin/v1/llm-configs", headers=admin_headers, json=_config_body("dup"))
        resp = await client.post(
            "/admin/v1/llm-configs", headers=admin_headers, json=_config_body("dup")
        )
        assert resp.status_code == 409

    async def test_custom_requires_base_url(self, client: AsyncClient, admin_headers: dict) -> None:
        resp = await client.post(
            "/admin/v1/llm-configs",
            headers=admin_headers,
            json=_config_body("custom", api_type="custom", api_base_url=None),
        )
        assert resp.status_code == 422

    async def test_invalid_env_var_name(self, client: AsyncClient, admin_headers: dict) -> None:
        resp = await client.post(
            "/admin/v1/llm-configs",
            headers=admin_headers,
            json=_config_body("bad-env", api_key_env_var="sk-live-123"),
        )
        assert resp.status_code == 422

    async def test_members_are_forbidden(self, client: AsyncClient, user_headers: dict) -> None:
        resp = await client.get("/admin/v1/llm-configs", headers=user_headers)
        assert resp.status_code == 403

    async def test_active_config_cannot_be_deleted(
        self, client: AsyncClient, admin_headers: dict
    ) -> None:
        created = await client.post(
            "/admin/v1/llm-configs",
            headers=admin_headers,
            json=_config_body("live", is_active=True),
        )
        assert created.json()["is_active"] is True

        resp = await client.delete(
            f"/admin/v1/llm-configs/{created.json()['id']}", headers=admin_headers
        )
        assert resp.status_code == 409

    async def test_active_config_endpoint(
        self, client: AsyncClient, admin_headers: dict, user_headers: dict
    ) -> None:
        assert (await client.get("/v1/llm-config/active", headers=user_headers)).status_code == 404

        await client.post(
            "/admin/v1/llm-configs", headers=admin_headers, json=_config_body("a", is_active=True)
        )
        resp = await client.get("/v1/llm-config/active", headers=user_headers)
        assert resp.status_code == 200
        assert resp.json()["config_name"] == "a"


@pytest.mark.integration
class TestActivation:
    async def _create(self, client: AsyncClient, headers: dict, name: str) -> str:
        resp = await client.post("/admin/v1/llm-configs", headers=headers, json=_config_body(name))
        return resp.json()["id"]

    @pytest.mark.parametrize("order", [("a", "b"), ("b", "a")])
    async def test_activation_leaves_exactly_one_active(
        self, client: AsyncClient, admin_headers: dict, order: tuple[str, str]
    ) -> None:
        ids = {name: await self._create(client, admin_headers, name) for name in ("a", "b")}

        for name in order:
            resp = await client.put(
                f"/admin/v1/llm-configs/{ids[name]}/activate", headers=admin_headers
            )
            assert resp.status_code == 200
            assert await _active_names(client, admin_headers) == [name]

    async def test_reactivating_active_config(
        self, client: AsyncClient, admin_headers: dict
    ) -> None:
        config_id = await self._create(client, admin_headers, "only")
        for _ in range(2):
            await client.put(f"/admin/v1/llm-configs/{config_id}/activate", headers=admin_headers)
        assert await _active_names(client, admin_headers) == ["only"]

    async def test_update_with_is_active_switches(
        self, client: AsyncClient, admin_headers: dict
    ) -> None:
        first = await self._create(client, admin_headers, "first")
        second = await self._create(client, admin_headers, "second")
        await client.put(f"/admin/v1/llm-configs/{first}/activate", headers=admin_headers)

        resp = await client.put(
            f"/admin/v1/llm-configs/{second}", headers=admin_headers, json={"is_active": True}
        )
        assert resp.status_code == 200
        assert await _active_names(client, admin_headers) == ["second"]

    async def test_activate_unknown(self, client: AsyncClient, admin_headers: dict) -> None:
        resp = await client.put(
            f"/admin/v1/llm-configs/{uuid.uuid4()}/activate", headers=admin_headers
        )
        assert resp.status_code == 404

    async def test_concurrent_activations(self, tmp_path: Path) -> None:
        # A file database so each session gets its own connection
        engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'concurrent.db'}")
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        database = Database.from_engine(engine)

        a = create_test_llm_config("a", is_active=True)
        b = create_test_llm_config("b")
        c = create_test_llm_config("c")
        async with database.session() as session:
            session.add_all([a, b, c])

        async def activate(config_id: uuid.UUID) -> None:
            async with database.session() as session:
                await LLMConfigService(session).activate(config_id)

        try:
            results = await asyncio.gather(activate(b.id), activate(c.id), return_exceptions=True)

            assert any(r is None for r in results)
            for r in results:
                assert r is None or isinstance(r, ConflictError)

            async with database.session() as session:
                active = (
                    await session.execute(
                        select(LLMConfiguration.config_name).where(
                            LLMConfiguration.is_active.is_(True)
                        )
                    )
                ).scalars().all()
            assert len(active) == 1
            assert active[0] in {"b", "c"}
        finally:
            await engine.dispose()
