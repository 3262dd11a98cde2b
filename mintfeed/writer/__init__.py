"""Caption writing: completion client, instruction templates, normalization."""

from .llm_client import CompletionClient, get_anthropic_client, get_gemini_client, get_openai_client
from .normalizer import TRACKING_LINK_RE, ContentNormalizer, clean_text_basic, strip_tracking_links

__all__ = [
    "TRACKING_LINK_RE",
    "CompletionClient",
    "ContentNormalizer",
    "clean_text_basic",
    "get_anthropic_client",
    "get_gemini_client",
    "get_openai_client",
    "strip_tracking_links",
]
