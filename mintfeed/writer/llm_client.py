"""Completion client infrastructure: provider dispatch and retry logic."""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from typing import Any

from ..auth import get_api_key
from ..models import LLMConfig

log = logging.getLogger(__name__)

PROVIDER_KEYS = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "gemini": "GEMINI_API_KEY",
}


def get_openai_client():
    """Get an async OpenAI client."""
    from openai import AsyncOpenAI

    return AsyncOpenAI(api_key=get_api_key("OPENAI_API_KEY"))


def get_anthropic_client():
    """Get an async Anthropic client."""
    from anthropic import AsyncAnthropic

    return AsyncAnthropic(api_key=get_api_key("ANTHROPIC_API_KEY"))


def get_gemini_client():
    """Get a Gemini client using the google.genai SDK."""
    from google import genai

    return genai.Client(api_key=get_api_key("GEMINI_API_KEY"))


async def _call_openai(client: Any, model: str, instructions: str, prompt: str, max_tokens: int) -> str:
    """Call the OpenAI Responses API and return the output text."""
    response = await client.responses.create(
        model=model,
        instructions=instructions,
        input=prompt,
        max_output_tokens=max_tokens,
    )
    return response.output_text or ""


async def _call_anthropic(client: Any, model: str, instructions: str, prompt: str, max_tokens: int) -> str:
    """Call the Anthropic Messages API and return text response."""
    response = await client.messages.create(
        model=model,
        max_tokens=max_tokens,
        system=instructions,
        messages=[{"role": "user", "content": prompt}],
    )
    if not response.content:
        return ""
    return response.content[0].text


async def _call_gemini(client: Any, model: str, instructions: str, prompt: str, max_tokens: int) -> str:
    """Call Gemini and return text response."""
    from google.genai import types

    response = await client.aio.models.generate_content(
        model=model,
        contents=prompt,
        config=types.GenerateContentConfig(
            system_instruction=instructions,
            max_output_tokens=max_tokens,
        ),
    )
    return response.text or ""


_CALLERS = {
    "openai": (get_openai_client, _call_openai),
    "anthropic": (get_anthropic_client, _call_anthropic),
    "gemini": (get_gemini_client, _call_gemini),
}


async def _with_retry(fn: Callable[[], Awaitable[str]], config: LLMConfig) -> str:
    attempt = 0
    while True:
        try:
            return await fn()
        except Exception as exc:
            attempt += 1
            msg = str(exc).lower()
            if "not set" in msg and "api" in msg:
                raise
            if config.retry_max_attempts and attempt >= config.retry_max_attempts:
                raise

            delay = min(config.retry_max_seconds, config.retry_base_seconds * (2 ** (attempt - 1)))
            if config.retry_jitter:
                delay = max(0.0, delay * (1 + random.uniform(-config.retry_jitter, config.retry_jitter)))
            log.warning("Completion attempt %d failed (%s), retrying in %.1fs", attempt, exc, delay)
            await asyncio.sleep(delay)


class CompletionClient:
    """Language-completion service bound to one provider and model.

    The SDK client is created on first use and reused for the rest of the run.
    """

    def __init__(self, config: LLMConfig) -> None:
        if config.provider not in _CALLERS:
            raise ValueError(f"Unknown LLM provider: {config.provider}")
        self.config = config
        self._client: Any = None

    @property
    def provider(self) -> str:
        return self.config.provider

    def _get_client(self) -> Any:
        if self._client is None:
            factory, _ = _CALLERS[self.provider]
            self._client = factory()
        return self._client

    async def complete(self, instructions: str, prompt: str, max_output_tokens: int) -> str:
        """Return the model's output text for *prompt* under *instructions*."""
        _, caller = _CALLERS[self.provider]

        async def _invoke() -> str:
            return await caller(self._get_client(), self.config.model, instructions, prompt, max_output_tokens)

        return await _with_retry(_invoke, self.config)
