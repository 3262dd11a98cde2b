"""Tests for completion provider dispatch and retry."""

import asyncio
from types import SimpleNamespace

import pytest

from mintfeed.models import LLMConfig
from mintfeed.writer import llm_client
from mintfeed.writer.llm_client import CompletionClient, _call_anthropic, _call_openai, _with_retry

FAST_RETRY = {"retry_base_seconds": 0.0, "retry_max_seconds": 0.0, "retry_jitter": 0.0}


def test_with_retry_retries_until_success():
    attempts = []

    async def flaky():
        attempts.append(1)
        if len(attempts) < 3:
            raise RuntimeError("503 overloaded")
        return "ok"

    assert asyncio.run(_with_retry(flaky, LLMConfig(retry_max_attempts=3, **FAST_RETRY))) == "ok"
    assert len(attempts) == 3


def test_with_retry_gives_up_after_max_attempts():
    attempts = []

    async def failing():
        attempts.append(1)
        raise RuntimeError("503 overloaded")

    with pytest.raises(RuntimeError):
        asyncio.run(_with_retry(failing, LLMConfig(retry_max_attempts=2, **FAST_RETRY)))
    assert len(attempts) == 2


def test_with_retry_does_not_retry_missing_api_key():
    attempts = []

    async def no_key():
        attempts.append(1)
        raise ValueError("OPENAI_API_KEY not set")

    with pytest.raises(ValueError):
        asyncio.run(_with_retry(no_key, LLMConfig(retry_max_attempts=5, **FAST_RETRY)))
    assert len(attempts) == 1


def test_unknown_provider_rejected():
    with pytest.raises(ValueError, match="Unknown LLM provider"):
        CompletionClient(LLMConfig(provider="nope"))


def test_complete_dispatches_to_provider_and_reuses_client(monkeypatch):
    factory_calls = []
    seen = []

    def factory():
        factory_calls.append(1)
        return object()

    async def caller(client, model, instructions, prompt, max_tokens):
        seen.append((model, instructions, prompt, max_tokens))
        return "caption"

    monkeypatch.setitem(llm_client._CALLERS, "anthropic", (factory, caller))
    client = CompletionClient(LLMConfig(provider="anthropic", model="claude-sonnet-4-5"))

    async def run():
        first = await client.complete("be brief", "text", 150)
        second = await client.complete("be brief", "more", 150)
        return first, second

    assert asyncio.run(run()) == ("caption", "caption")
    assert len(factory_calls) == 1
    assert seen[0] == ("claude-sonnet-4-5", "be brief", "text", 150)


def test_missing_key_surfaces_from_client_factory():
    client = CompletionClient(LLMConfig(provider="openai", **FAST_RETRY))
    with pytest.raises(ValueError, match="OPENAI_API_KEY not set"):
        asyncio.run(client.complete("i", "p", 10))


def test_call_openai_uses_responses_api():
    captured = {}

    async def create(**kwargs):
        captured.update(kwargs)
        return SimpleNamespace(output_text="from openai")

    client = SimpleNamespace(responses=SimpleNamespace(create=create))
    result = asyncio.run(_call_openai(client, "gpt-4.1", "inst", "prompt", 150))

    assert result == "from openai"
    assert captured == {"model": "gpt-4.1", "instructions": "inst", "input": "prompt", "max_output_tokens": 150}


def test_call_anthropic_handles_empty_content():
    async def create(**kwargs):
        return SimpleNamespace(content=[])

    client = SimpleNamespace(messages=SimpleNamespace(create=create))
    assert asyncio.run(_call_anthropic(client, "m", "inst", "prompt", 10)) == ""
