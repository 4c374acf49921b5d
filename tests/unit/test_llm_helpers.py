"""
Unit tests for the completion client.

Tests cover:
- Parameter adaptation per model family
- Refusal, truncation and empty responses
- JSON mode: token budget growth, structural repair, invalid output
- Transient error retries and the connection check
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest

from src.utils.exceptions import (
    ConnectionFailed,
    EmptyGeneration,
    GenerationRefused,
    GenerationTruncated,
    InvalidJSON,
)
from src.utils.llm_helpers import (
    TRANSIENT_ERRORS,
    CompletionClient,
    supports_sampling,
    uses_completion_tokens,
)
from src.utils.retry import RetryPolicy


def make_completion(content, finish_reason="stop", refusal=None, total_tokens=42):
    message = SimpleNamespace(content=content, refusal=refusal)
    return SimpleNamespace(
        choices=[SimpleNamespace(message=message, finish_reason=finish_reason)],
        usage=SimpleNamespace(total_tokens=total_tokens),
    )


@pytest.fixture
def openai_client():
    client = MagicMock()
    client.chat.completions.create = AsyncMock()
    client.models.list = AsyncMock()
    return client


@pytest.fixture
def completion_client(settings, openai_client):
    return CompletionClient(
        settings,
        client=openai_client,
        retry_policy=RetryPolicy(max_attempts=3, initial_delay=0, retry_on=TRANSIENT_ERRORS),
    )


def sent_params(openai_client, index=-1):
    return openai_client.chat.completions.create.await_args_list[index].kwargs


class TestModelFamilies:
    @pytest.mark.parametrize("model", ["gpt-4o", "gpt-4o-mini", "gpt-5-mini", "o1-preview", "o3", "o4-mini"])
    def test_completion_tokens_models(self, model):
        assert uses_completion_tokens(model)

    @pytest.mark.parametrize("model", ["gpt-4-turbo", "gpt-3.5-turbo"])
    def test_legacy_models(self, model):
        assert not uses_completion_tokens(model)
        assert supports_sampling(model)

    @pytest.mark.parametrize("model", ["o1", "o3-mini", "o4-mini", "gpt-5"])
    def test_reasoning_models_skip_sampling(self, model):
        assert not supports_sampling(model)


class TestBuildParams:
    def test_legacy_model_gets_max_tokens_and_sampling(self, completion_client):
        params = completion_client.build_params(
            "sys", "user", model="gpt-4-turbo", max_tokens=100, temperature=0.5, top_p=0.9
        )
        assert params["max_tokens"] == 100
        assert "max_completion_tokens" not in params
        assert params["temperature"] == 0.5
        assert params["top_p"] == 0.9
        assert params["messages"][0] == {"role": "system", "content": "sys"}

    def test_reasoning_model_drops_sampling(self, completion_client):
        params = completion_client.build_params(
            "sys", "user", model="gpt-5-mini", max_tokens=100, temperature=0.5, presence_penalty=0.2
        )
        assert params["max_completion_tokens"] == 100
        assert "max_tokens" not in params
        assert "temperature" not in params
        assert "presence_penalty" not in params

    def test_json_mode(self, completion_client):
        params = completion_client.build_params("s", "u", model="gpt-4o", max_tokens=10, json_mode=True)
        assert params["response_format"] == {"type": "json_object"}


class TestComplete:
    @pytest.mark.asyncio
    async def test_returns_content(self, completion_client, openai_client):
        openai_client.chat.completions.create.return_value = make_completion("Hello")

        assert await completion_client.complete("sys", "user") == "Hello"
        params = sent_params(openai_client)
        assert params["model"] == "gpt-4-turbo"
        assert params["temperature"] == 0.8
        assert params["frequency_penalty"] == 0.3

    @pytest.mark.asyncio
    async def test_refusal(self, completion_client, openai_client):
        openai_client.chat.completions.create.return_value = make_completion(None, refusal="no")
        with pytest.raises(GenerationRefused):
            await completion_client.complete("sys", "user")

    @pytest.mark.asyncio
    async def test_truncated_without_content(self, completion_client, openai_client):
        openai_client.chat.completions.create.return_value = make_completion("", finish_reason="length")
        with pytest.raises(GenerationTruncated):
            await completion_client.complete("sys", "user")

    @pytest.mark.asyncio
    async def test_empty_response(self, completion_client, openai_client):
        openai_client.chat.completions.create.return_value = make_completion(None, finish_reason="content_filter")
        with pytest.raises(EmptyGeneration):
            await completion_client.complete("sys", "user")

    @pytest.mark.asyncio
    async def test_truncated_with_content_returns_partial(self, completion_client, openai_client):
        openai_client.chat.completions.create.return_value = make_completion("Partial", finish_reason="length")
        assert await completion_client.complete("sys", "user") == "Partial"

    @pytest.mark.asyncio
    async def test_transient_errors_are_retried(self, completion_client, openai_client):
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        openai_client.chat.completions.create.side_effect = [
            openai.APIConnectionError(request=request),
            make_completion("Recovered"),
        ]
        assert await completion_client.complete("sys", "user") == "Recovered"
        assert openai_client.chat.completions.create.await_count == 2

    def test_missing_api_key(self, settings):
        settings.openai_api_key = ""
        with pytest.raises(ValueError, match="OPENAI_API_KEY"):
            CompletionClient(settings).client


class TestCompleteJson:
    @pytest.mark.asyncio
    async def test_parses_object(self, completion_client, openai_client):
        openai_client.chat.completions.create.return_value = make_completion('{"a": 1}')

        assert await completion_client.complete_json("sys", "user") == {"a": 1}
        params = sent_params(openai_client)
        assert params["response_format"] == {"type": "json_object"}
        assert params["max_tokens"] == completion_client.settings.json_max_tokens

    @pytest.mark.asyncio
    async def test_length_cutoff_retries_with_larger_budget(self, completion_client, openai_client):
        openai_client.chat.completions.create.side_effect = [
            make_completion('{"title": "cut', finish_reason="length"),
            make_completion('{"title": "complete"}'),
        ]

        assert await completion_client.complete_json("sys", "user", max_tokens=1000) == {"title": "complete"}
        assert sent_params(openai_client, 0)["max_tokens"] == 1000
        assert sent_params(openai_client, 1)["max_tokens"] == 2000

    @pytest.mark.asyncio
    async def test_budget_is_capped_by_ceiling(self, completion_client, openai_client):
        completion_client.settings.json_max_tokens_ceiling = 5000
        openai_client.chat.completions.create.side_effect = [
            make_completion('{"a": "x', finish_reason="length"),
            make_completion('{"a": "x', finish_reason="length"),
            make_completion('{"a": "x"}'),
        ]

        await completion_client.complete_json("sys", "user", max_tokens=4000)
        budgets = [call.kwargs["max_tokens"] for call in openai_client.chat.completions.create.await_args_list]
        assert budgets == [4000, 5000, 5000]

    @pytest.mark.asyncio
    async def test_repairs_on_last_attempt(self, completion_client, openai_client):
        openai_client.chat.completions.create.return_value = make_completion(
            '{"tags": ["a", "b', finish_reason="length"
        )

        assert await completion_client.complete_json("sys", "user") == {"tags": ["a", "b"]}
        assert openai_client.chat.completions.create.await_count == 3

    @pytest.mark.asyncio
    async def test_invalid_json_is_not_retried(self, completion_client, openai_client):
        openai_client.chat.completions.create.return_value = make_completion("I cannot produce JSON")

        with pytest.raises(InvalidJSON):
            await completion_client.complete_json("sys", "user")
        assert openai_client.chat.completions.create.await_count == 1

    @pytest.mark.asyncio
    async def test_empty_truncated_on_every_attempt(self, completion_client, openai_client):
        openai_client.chat.completions.create.return_value = make_completion("", finish_reason="length")

        with pytest.raises(GenerationTruncated):
            await completion_client.complete_json("sys", "user")

    @pytest.mark.asyncio
    async def test_refusal(self, completion_client, openai_client):
        openai_client.chat.completions.create.return_value = make_completion(None, refusal="policy")
        with pytest.raises(GenerationRefused):
            await completion_client.complete_json("sys", "user")


class TestCheckConnection:
    @pytest.mark.asyncio
    async def test_reachable(self, completion_client, openai_client):
        assert await completion_client.check_connection() is True
        openai_client.models.list.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unreachable(self, completion_client, openai_client):
        request = httpx.Request("GET", "https://api.openai.com/v1/models")
        openai_client.models.list.side_effect = openai.APIConnectionError(request=request)

        with pytest.raises(ConnectionFailed):
            await completion_client.check_connection()

    @pytest.mark.asyncio
    async def test_missing_key(self, settings):
        settings.openai_api_key = ""
        with pytest.raises(ConnectionFailed):
            await CompletionClient(settings).check_connection()
