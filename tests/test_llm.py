"""Tests for LLM providers."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from radar.llm import PROVIDERS, get_provider_for_task, reset_providers
from radar.llm.anthropic_provider import AnthropicProvider
from radar.llm.openai_compat import OpenAICompatibleProvider


@pytest.fixture
def openai_provider():
    return OpenAICompatibleProvider(
        model="test-model",
        api_key="test-key",
        base_url="http://localhost:9999",
    )


@pytest.fixture(autouse=True)
def _fresh_providers():
    reset_providers()
    yield
    reset_providers()


def _mock_openai_response(content="test response"):
    return {
        "choices": [{"message": {"content": content}}],
        "usage": {"prompt_tokens": 10, "completion_tokens": 20},
    }


def _mock_client(mock_client_cls, body):
    mock_resp = MagicMock()
    mock_resp.json.return_value = body
    mock_resp.raise_for_status = MagicMock()

    mock_client = AsyncMock()
    mock_client.post.return_value = mock_resp
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    mock_client_cls.return_value = mock_client
    return mock_client


def test_registry():
    assert PROVIDERS["anthropic"] is AnthropicProvider
    assert PROVIDERS["openai_compatible"] is OpenAICompatibleProvider


@pytest.mark.asyncio
@patch("radar.llm.openai_compat.httpx.AsyncClient")
async def test_openai_compat_complete(mock_client_cls, openai_provider):
    """OpenAI-compatible provider makes correct API call."""
    mock_client = _mock_client(mock_client_cls, _mock_openai_response("hello world"))

    response = await openai_provider.complete("test prompt", system="sys")

    assert response.text == "hello world"
    assert response.input_tokens == 10
    assert response.output_tokens == 20

    call_args = mock_client.post.call_args
    assert call_args.args[0] == "http://localhost:9999/chat/completions"
    payload = call_args.kwargs["json"]
    assert payload["model"] == "test-model"
    assert len(payload["messages"]) == 2
    assert payload["messages"][0]["role"] == "system"
    assert payload["messages"][1]["content"] == "test prompt"
    assert "response_format" not in payload
    assert call_args.kwargs["headers"]["Authorization"] == "Bearer test-key"


@pytest.mark.asyncio
@patch("radar.llm.openai_compat.httpx.AsyncClient")
async def test_openai_compat_no_system(mock_client_cls, openai_provider):
    """System message is omitted when empty."""
    mock_client = _mock_client(mock_client_cls, _mock_openai_response())

    await openai_provider.complete("prompt only")

    payload = mock_client.post.call_args.kwargs["json"]
    assert len(payload["messages"]) == 1
    assert payload["messages"][0]["role"] == "user"


@pytest.mark.asyncio
@patch("radar.llm.openai_compat.httpx.AsyncClient")
async def test_openai_compat_json_mode(mock_client_cls):
    provider = OpenAICompatibleProvider(
        model="llama3", base_url="http://localhost:11434/v1/", json_mode=True,
    )
    mock_client = _mock_client(mock_client_cls, _mock_openai_response("{}"))

    await provider.complete("prompt")

    call_args = mock_client.post.call_args
    assert call_args.args[0] == "http://localhost:11434/v1/chat/completions"
    assert call_args.kwargs["json"]["response_format"] == {"type": "json_object"}
    assert "Authorization" not in call_args.kwargs["headers"]


@pytest.mark.asyncio
@patch("radar.llm.anthropic_provider.anthropic.AsyncAnthropic")
async def test_anthropic_complete(mock_cls):
    message = SimpleNamespace(
        content=[SimpleNamespace(type="text", text="claude says hi")],
        usage=SimpleNamespace(input_tokens=5, output_tokens=7),
    )
    client = MagicMock()
    client.messages.create = AsyncMock(return_value=message)
    mock_cls.return_value = client

    provider = AnthropicProvider(model="claude-test", api_key="k")
    response = await provider.complete("hello", system="be brief")

    assert response.text == "claude says hi"
    assert response.input_tokens == 5
    kwargs = client.messages.create.call_args.kwargs
    assert kwargs["model"] == "claude-test"
    assert kwargs["system"] == "be brief"
    assert kwargs["messages"] == [{"role": "user", "content": "hello"}]


def test_get_provider_for_task_caches_instances(sample_config):
    first = get_provider_for_task(sample_config, "analyze")
    second = get_provider_for_task(sample_config, "analyze")
    assert first is second
    assert isinstance(first, OpenAICompatibleProvider)
    assert first.model == "test-model"


def test_get_provider_for_task_unknown_type():
    config = {
        "llm": {
            "providers": {"weird": {"type": "carrier_pigeon"}},
            "tasks": {"analyze": {"provider": "weird"}},
        },
    }
    with pytest.raises(ValueError, match="Unknown LLM provider type"):
        get_provider_for_task(config, "analyze")


@pytest.mark.asyncio
@patch("radar.retry.asyncio.sleep", new_callable=AsyncMock)
@patch("radar.llm.openai_compat.httpx.AsyncClient")
async def test_complete_retries_connection_errors(mock_client_cls, _sleep, openai_provider):
    mock_client = _mock_client(mock_client_cls, _mock_openai_response("second try"))
    mock_resp = mock_client.post.return_value
    mock_client.post.side_effect = [httpx.ConnectError("refused"), mock_resp]

    response = await openai_provider.complete("prompt")

    assert response.text == "second try"
    assert mock_client.post.call_count == 2
