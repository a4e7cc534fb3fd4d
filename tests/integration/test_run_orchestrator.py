"""Tests for RunOrchestrator against a real session and a stubbed gateway."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
import respx
from httpx import Response
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from factories import create_test_llm_config, create_test_prompt, create_test_taxonomy
from prompthub.common.errors import (
    GatewayError,
    GatewayTimeoutError,
    NoActiveConfigurationError,
    StorageError,
    ValidationError,
)
from prompthub.config import LLMSettings
from prompthub.db.session import Database
from prompthub.models.group import Subgroup
from prompthub.models.run_log import RunLog, RunStatus
from prompthub.providers.gateway import LLMGateway
from prompthub.services.run_service import RunOrchestrator
from prompthub.services.usage_logger import UsageLogger

API_KEY_ENV = "PROMPTHUB_TEST_ORCHESTRATOR_KEY"
OPENAI_URL = "https://api.openai.com/v1/chat/completions"


class FailingUsageLogger(UsageLogger):
    async def record(self, entry: RunLog) -> RunLog:
        raise StorageError("disk full")


@pytest.fixture
async def subgroup(db_session: AsyncSession) -> Subgroup:
    group, sub = create_test_taxonomy()
    db_session.add_all([group, sub])
    await db_session.commit()
    return sub


@pytest.fixture
async def active_config(db_session: AsyncSession, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(API_KEY_ENV, "secret-from-env")
    db_session.add(
        create_test_llm_config(
            api_key_env_var=API_KEY_ENV,
            default_parameters={"temperature": 0.5, "top_p": 1},
            is_active=True,
        )
    )
    await db_session.commit()


def _gateway(**kwargs) -> AsyncMock:
    gateway = AsyncMock(spec=LLMGateway)
    gateway.invoke.configure_mock(**kwargs)
    return gateway


async def _logs(db_session: AsyncSession) -> list[RunLog]:
    return list((await db_session.execute(select(RunLog))).scalars().all())


@pytest.mark.integration
class TestRunOrchestrator:
    async def test_success(
        self,
        db_session: AsyncSession,
        database: Database,
        subgroup: Subgroup,
        active_config: None,
    ) -> None:
        prompt = create_test_prompt(subgroup, prompt_text="Summarise {{text}}")
        db_session.add(prompt)
        await db_session.commit()
        gateway = _gateway(return_value="A summary")

        outcome = await RunOrchestrator(db_session, gateway, UsageLogger(database)).run(
            prompt.id, {"text": "the report"}, parameters={"temperature": 0}
        )

        assert outcome.succeeded
        assert outcome.response == "A summary"
        assert outcome.logged is True
        assert outcome.duration_ms >= 0
        assert outcome.ended_at >= outcome.started_at

        config, rendered = gateway.invoke.await_args.args
        assert rendered == "Summarise the report"
        assert config.credential == "secret-from-env"
        assert config.parameters == {"temperature": 0, "top_p": 1}

        logs = await _logs(db_session)
        assert len(logs) == 1
        assert logs[0].id == outcome.run_id
        assert logs[0].status == RunStatus.SUCCESS

    async def test_zero_variables_skip_validation(
        self,
        db_session: AsyncSession,
        database: Database,
        subgroup: Subgroup,
        active_config: None,
    ) -> None:
        prompt = create_test_prompt(subgroup, prompt_text="Tell me a joke.")
        db_session.add(prompt)
        await db_session.commit()
        gateway = _gateway(return_value="Knock knock")

        outcome = await RunOrchestrator(db_session, gateway, UsageLogger(database)).run(
            prompt.id, {}
        )

        assert outcome.succeeded
        gateway.invoke.assert_awaited_once()
        assert gateway.invoke.await_args.args[1] == "Tell me a joke."

    async def test_missing_values_stop_before_invoking(
        self,
        db_session: AsyncSession,
        database: Database,
        subgroup: Subgroup,
        active_config: None,
    ) -> None:
        prompt = create_test_prompt(subgroup, prompt_text="{{a}} and {{b}}")
        db_session.add(prompt)
        await db_session.commit()
        gateway = _gateway(return_value="unused")

        with pytest.raises(ValidationError) as exc_info:
            await RunOrchestrator(db_session, gateway, UsageLogger(database)).run(
                prompt.id, {"a": "x"}
            )

        assert exc_info.value.details["missing_variables"] == ["b"]
        gateway.invoke.assert_not_awaited()
        assert await _logs(db_session) == []

    async def test_no_active_configuration(
        self, db_session: AsyncSession, database: Database, subgroup: Subgroup
    ) -> None:
        prompt = create_test_prompt(subgroup, prompt_text="No variables here")
        db_session.add(prompt)
        await db_session.commit()
        gateway = _gateway(return_value="unused")

        with pytest.raises(NoActiveConfigurationError):
            await RunOrchestrator(db_session, gateway, UsageLogger(database)).run(prompt.id, {})

        gateway.invoke.assert_not_awaited()
        assert await _logs(db_session) == []

    @pytest.mark.parametrize(
        "error",
        [GatewayError("provider returned 500"), GatewayTimeoutError("provider timed out")],
    )
    async def test_gateway_failure_logged_once(
        self,
        db_session: AsyncSession,
        database: Database,
        subgroup: Subgroup,
        active_config: None,
        error: GatewayError,
    ) -> None:
        prompt = create_test_prompt(subgroup, prompt_text="Hi {{name}}")
        db_session.add(prompt)
        await db_session.commit()

        outcome = await RunOrchestrator(
            db_session, _gateway(side_effect=error), UsageLogger(database)
        ).run(prompt.id, {"name": "Ada"})

        assert not outcome.succeeded
        assert outcome.error is error
        assert outcome.logged is True

        logs = await _logs(db_session)
        assert len(logs) == 1
        assert logs[0].status == RunStatus.FAILURE
        assert logs[0].output_data == {"error": error.message}

    async def test_logging_failure_does_not_mask_result(
        self,
        db_session: AsyncSession,
        database: Database,
        subgroup: Subgroup,
        active_config: None,
    ) -> None:
        prompt = create_test_prompt(subgroup, prompt_text="Hi {{name}}")
        db_session.add(prompt)
        await db_session.commit()

        outcome = await RunOrchestrator(
            db_session, _gateway(return_value="Hello Ada"), FailingUsageLogger(database)
        ).run(prompt.id, {"name": "Ada"})

        assert outcome.succeeded
        assert outcome.response == "Hello Ada"
        assert outcome.logged is False
        assert outcome.run_id is None

    @pytest.mark.parametrize("body", [{"choices": ["oops"]}, {"choices": "abc"}])
    @respx.mock
    async def test_malformed_provider_body_logged_once(
        self,
        db_session: AsyncSession,
        database: Database,
        subgroup: Subgroup,
        active_config: None,
        body: dict,
    ) -> None:
        prompt = create_test_prompt(subgroup, prompt_text="No variables here")
        db_session.add(prompt)
        await db_session.commit()
        respx.post(OPENAI_URL).mock(return_value=Response(200, json=body))
        gateway = LLMGateway(LLMSettings(timeout_seconds=5, connect_timeout_seconds=1))

        outcome = await RunOrchestrator(db_session, gateway, UsageLogger(database)).run(
            prompt.id, {}
        )

        assert not outcome.succeeded
        assert isinstance(outcome.error, GatewayError)
        assert outcome.error.status_code == 502
        assert outcome.logged is True

        logs = await _logs(db_session)
        assert len(logs) == 1
        assert logs[0].status == RunStatus.FAILURE

    async def test_unexpected_invoke_error_logged_once(
        self,
        db_session: AsyncSession,
        database: Database,
        subgroup: Subgroup,
        active_config: None,
    ) -> None:
        prompt = create_test_prompt(subgroup, prompt_text="Hi {{name}}")
        db_session.add(prompt)
        await db_session.commit()

        outcome = await RunOrchestrator(
            db_session, _gateway(side_effect=RuntimeError("boom")), UsageLogger(database)
        ).run(prompt.id, {"name": "Ada"})

        assert not outcome.succeeded
        assert isinstance(outcome.error, GatewayError)
        assert "RuntimeError" in outcome.error.message
        assert outcome.logged is True

        logs = await _logs(db_session)
        assert len(logs) == 1
        assert logs[0].status == RunStatus.FAILURE
