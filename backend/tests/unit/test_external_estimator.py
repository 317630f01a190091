"""Unit tests for the external model estimator."""

import asyncio

import pytest
from unittest.mock import AsyncMock, MagicMock

from config.errors import ErrorCode, ExternalModelError
from models.estimation import OutcomeStatus
from services.external_estimator import ExternalModelEstimator, build_user_prompt, parse_hours


class TestParseHours:
    """Tests for parse_hours."""

    @pytest.mark.parametrize("content,expected", [
        ("2.5", 2.5),
        (" 3 ", 3.0),
        ("2.5 hours", 2.5),
        ("About 1.75h.", 1.75),
        ("~4", 4.0),
        (".5", 0.5),
        ("1.2.3", 1.2),
    ])
    def test_numeric(self, content, expected):
        assert parse_hours(content) == expected

    @pytest.mark.parametrize("content", ["", None, "two hours", "...", "n/a"])
    def test_non_numeric(self, content):
        assert parse_hours(content) is None


class TestBuildUserPrompt:
    """Tests for build_user_prompt."""

    def test_prompt(self, sample_input):
        prompt = build_user_prompt(sample_input)

        assert prompt.split("\n") == [
            "Service type: repair",
            "Vehicle: Yamaha Aerox (2010)",
            "Task description: Engine stalls when warm and the brake lever feels soft",
            "Output only a single number in hours, e.g. 2.5",
        ]

    def test_unknown_year(self, sample_input):
        data = sample_input.model_copy(update={"vehicle_year": ""})

        assert "(unknown year)" in build_user_prompt(data)


class TestExternalModelEstimator:
    """Tests for ExternalModelEstimator."""

    @pytest.mark.asyncio
    async def test_unavailable_without_key(self, config_provider, sample_input, llm_factory):
        estimator = ExternalModelEstimator(config_provider, api_key="", llm_factory=llm_factory)

        outcome = await estimator.estimate(sample_input)

        assert outcome.status == OutcomeStatus.UNAVAILABLE
        llm_factory.assert_not_called()

    @pytest.mark.asyncio
    async def test_unavailable_when_disabled(self, config_provider, sample_input, llm_factory):
        config_provider.save_override({"openAI": {"enabled": False}})
        estimator = ExternalModelEstimator(config_provider, api_key="test-key", llm_factory=llm_factory)

        outcome = await estimator.estimate(sample_input)

        assert outcome.status == OutcomeStatus.UNAVAILABLE
        llm_factory.assert_not_called()

    @pytest.mark.asyncio
    async def test_success(self, config_provider, sample_input, llm_factory):
        estimator = ExternalModelEstimator(config_provider, api_key="test-key", llm_factory=llm_factory)

        outcome = await estimator.estimate(sample_input)

        assert outcome.status == OutcomeStatus.SUCCESS
        assert outcome.hours == 2.5

    @pytest.mark.asyncio
    async def test_uses_configured_model_and_prompt(self, config_provider, sample_input, llm_factory):
        config_provider.save_override({"openAI": {"model": "gpt-4o", "temperature": 0.0}})
        estimator = ExternalModelEstimator(
            config_provider, api_key="test-key", llm_factory=llm_factory, timeout_seconds=3
        )

        await estimator.estimate(sample_input)

        llm_factory.assert_called_once_with(
            model="gpt-4o", temperature=0.0, api_key="test-key", timeout_seconds=3
        )
        llm = llm_factory.return_value
        kwargs = llm.generate_with_system_prompt.call_args.kwargs
        assert kwargs["system_prompt"].startswith("You are a service advisor")
        assert kwargs["user_message"] == build_user_prompt(sample_input)

    @pytest.mark.asyncio
    async def test_reply_clamped_and_rounded(self, config_provider, sample_input, llm_reply):
        factory = MagicMock(return_value=llm_reply("12.3 hours"))
        estimator = ExternalModelEstimator(config_provider, api_key="test-key", llm_factory=factory)

        outcome = await estimator.estimate(sample_input)

        assert outcome.hours == 8.0

    @pytest.mark.asyncio
    async def test_reply_rounded_to_granularity(self, config_provider, sample_input, llm_reply):
        factory = MagicMock(return_value=llm_reply("2.4"))
        estimator = ExternalModelEstimator(config_provider, api_key="test-key", llm_factory=factory)

        outcome = await estimator.estimate(sample_input)

        assert outcome.hours == 2.5

    @pytest.mark.asyncio
    async def test_non_numeric_reply_fails(self, config_provider, sample_input, llm_reply):
        factory = MagicMock(return_value=llm_reply("I cannot estimate that"))
        estimator = ExternalModelEstimator(config_provider, api_key="test-key", llm_factory=factory)

        outcome = await estimator.estimate(sample_input)

        assert outcome.status == OutcomeStatus.FAILED
        assert outcome.hours is None
        assert outcome.reason == ErrorCode.LLM_INVALID_RESPONSE

    @pytest.mark.asyncio
    async def test_llm_error_absorbed(self, config_provider, sample_input):
        llm = MagicMock()
        llm.generate_with_system_prompt = AsyncMock(side_effect=ExternalModelError(
            code=ErrorCode.LLM_TIMEOUT, message="timed out", model="gpt-4o-mini"
        ))
        estimator = ExternalModelEstimator(
            config_provider, api_key="test-key", llm_factory=MagicMock(return_value=llm)
        )

        outcome = await estimator.estimate(sample_input)

        assert outcome.status == OutcomeStatus.FAILED
        assert outcome.reason == ErrorCode.LLM_TIMEOUT

    @pytest.mark.asyncio
    async def test_unexpected_error_absorbed(self, config_provider, sample_input):
        estimator = ExternalModelEstimator(
            config_provider,
            api_key="test-key",
            llm_factory=MagicMock(side_effect=RuntimeError("bad client"))
        )

        outcome = await estimator.estimate(sample_input)

        assert outcome.status == OutcomeStatus.FAILED
        assert "bad client" in outcome.reason

    @pytest.mark.asyncio
    async def test_slow_model_times_out(self, config_provider, sample_input, mock_llm_service, mock_chat_openai):
        async def _slow(*args, **kwargs):
            await asyncio.sleep(5)

        mock_llm_service.timeout_seconds = 0.01
        mock_chat_openai.ainvoke = _slow
        estimator = ExternalModelEstimator(
            config_provider, api_key="test-key", llm_factory=MagicMock(return_value=mock_llm_service)
        )

        outcome = await estimator.estimate(sample_input)

        assert outcome.status == OutcomeStatus.FAILED
        assert outcome.reason == ErrorCode.LLM_TIMEOUT
