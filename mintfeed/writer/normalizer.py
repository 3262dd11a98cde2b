"""Caption normalization with a deterministic fallback."""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Callable

from ..errors import NormalizationFallback
from ..models import LLMConfig
from . import prompts
from .llm_client import CompletionClient

log = logging.getLogger(__name__)

TRACKING_LINK_RE = re.compile(r"https://t\.co/\w+")
_WHITESPACE_RE = re.compile(r"\s+")
_ELLIPSIS = "…"


def strip_tracking_links(text: str) -> str:
    # Removing one link can splice its neighbours into a new match
    count = 1
    while count:
        text, count = TRACKING_LINK_RE.subn("", text)
    return text


def clean_text_basic(text: str, max_chars: int | None = None) -> str:
    """Remove tracking links, collapse whitespace, and cap at *max_chars*.

    The result is never longer than the input.
    """
    cleaned = _WHITESPACE_RE.sub(" ", strip_tracking_links(text)).strip()
    if max_chars is not None and max_chars < 1:
        return ""
    if max_chars is not None and len(cleaned) > max_chars:
        cleaned = cleaned[: max(0, max_chars - 1)].rstrip() + _ELLIPSIS
    return cleaned


class ContentNormalizer:
    """Turns raw post text, thread text, or video metadata into a caption.

    Every public method returns a usable string: a failed, timed-out, or empty
    completion falls back to ``clean_text_basic``.
    """

    def __init__(self, client: CompletionClient, config: LLMConfig) -> None:
        self.client = client
        self.config = config

    async def normalize(self, text: str, is_thread_summary: bool = False) -> str:
        budget = self.config.caption_max_chars
        return await self._complete_or_fallback(
            prompts.cleanup_instructions(is_thread_summary, budget),
            prompts.cleanup_input(text, is_thread_summary),
            self.config.max_output_tokens,
            lambda: clean_text_basic(text, budget),
        )

    async def summarize_thread(self, thread_text: str, fallback_text: str) -> str:
        budget = self.config.caption_max_chars
        return await self._complete_or_fallback(
            prompts.thread_summary_instructions(budget),
            prompts.THREAD_SUMMARY_INPUT.format(thread_text=thread_text),
            self.config.max_output_tokens,
            lambda: clean_text_basic(fallback_text, budget),
        )

    async def normalize_video(self, title: str, description: str) -> str:
        budget = self.config.video_caption_max_chars
        return await self._complete_or_fallback(
            prompts.video_caption_instructions(budget),
            prompts.VIDEO_CAPTION_INPUT.format(title=title, description=description),
            self.config.video_max_output_tokens,
            lambda: clean_text_basic(title, budget),
        )

    async def _complete_or_fallback(
        self,
        instructions: str,
        prompt: str,
        max_output_tokens: int,
        fallback: Callable[[], str],
    ) -> str:
        try:
            output = await asyncio.wait_for(
                self.client.complete(instructions, prompt, max_output_tokens),
                timeout=self.config.timeout_seconds,
            )
            output = strip_tracking_links(output or "").strip()
            if not output:
                raise NormalizationFallback("completion service returned empty output")
            return output
        except asyncio.TimeoutError:
            log.warning("Completion timed out after %.0fs; using deterministic cleanup", self.config.timeout_seconds)
        except Exception as e:
            log.warning("Completion failed (%s); using deterministic cleanup", e)
        return fallback()
