"""Pipeline orchestration: candidate selection, run log, and the intake pipeline."""

from __future__ import annotations

from typing import Literal

from ..auth import get_api_key
from ..config import get_downloads_dir, get_ledger_path, get_run_log_path
from ..errors import ConfigError
from ..fetcher import BirdSource, YouTubeSource
from ..fetcher.youtube import watch_url
from ..ledger import DeduplicationStore
from ..media import HttpImageDownloader, MediaAcquirer, YtDlpDownloader
from ..minter import CommandMinter
from ..models import MintfeedConfig
from ..writer import CompletionClient, ContentNormalizer
from .pipeline import IntakePipeline, RunOutcome
from .runlog import RunLog
from .selection import first_photo, is_reply_to_other, select_candidate, skip_reason


def _require_key(key_name: str) -> str:
    try:
        return get_api_key(key_name)
    except ValueError as e:
        raise ConfigError(str(e)) from e


def build_pipeline(config: MintfeedConfig, source: Literal["twitter", "youtube"]) -> IntakePipeline:
    """Wire up the production collaborators for one source platform."""
    try:
        client = CompletionClient(config.llm)
        minter = CommandMinter(config.minting)
    except ValueError as e:
        raise ConfigError(str(e)) from e
    normalizer = ContentNormalizer(client, config.llm)

    if source == "youtube":
        fetcher: BirdSource | YouTubeSource = YouTubeSource(config.youtube, _require_key(config.youtube.api_key_env))
        downloader = YtDlpDownloader(config.media.downloader, config.media.timeout_seconds, url_for=watch_url)
        acquirer = MediaAcquirer(downloader, get_downloads_dir(), kind="video")
        capacity = config.ledger.video_capacity
    else:
        fetcher = BirdSource(config.twitter)
        acquirer = MediaAcquirer(
            HttpImageDownloader(config.media.image_timeout_seconds), get_downloads_dir(), kind="image"
        )
        capacity = config.ledger.image_capacity

    return IntakePipeline(
        source=source,
        fetcher=fetcher,
        normalizer=normalizer,
        acquirer=acquirer,
        minter=minter,
        ledger=DeduplicationStore(get_ledger_path(source), capacity),
        run_log=RunLog(get_run_log_path()),
        creator_address=_require_key(config.minting.creator_address_env),
        config=config,
    )


__all__ = [
    "IntakePipeline",
    "RunLog",
    "RunOutcome",
    "build_pipeline",
    "first_photo",
    "is_reply_to_other",
    "select_candidate",
    "skip_reason",
]
