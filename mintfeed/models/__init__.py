"""Pydantic models for the mintfeed application."""

from __future__ import annotations

from .config import (
    LedgerConfig,
    LLMConfig,
    MediaConfig,
    MintfeedConfig,
    MintingConfig,
    PathsConfig,
    TwitterConfig,
    YouTubeConfig,
)
from .content import (
    DedupRecord,
    MintRequest,
    MintResult,
    NormalizedContent,
    RunLogEntry,
)
from .media import MediaBundle
from .source import (
    QUOTED,
    REPLIED_TO,
    RETWEETED,
    FetchWindow,
    MediaDescriptor,
    ParentRef,
    SourceItem,
    ThreadRecord,
)

__all__ = [
    "QUOTED",
    "REPLIED_TO",
    "RETWEETED",
    "DedupRecord",
    "FetchWindow",
    "LLMConfig",
    "LedgerConfig",
    "MediaBundle",
    "MediaConfig",
    "MediaDescriptor",
    "MintRequest",
    "MintResult",
    "MintfeedConfig",
    "MintingConfig",
    "NormalizedContent",
    "ParentRef",
    "PathsConfig",
    "RunLogEntry",
    "SourceItem",
    "ThreadRecord",
    "TwitterConfig",
    "YouTubeConfig",
]
