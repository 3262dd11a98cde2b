"""Pydantic models for mintfeed configuration."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field


class LLMConfig(BaseModel):
    """Completion provider and caption budget configuration."""

    provider: str = "openai"
    model: str = "gpt-4.1"
    max_output_tokens: int = 150
    video_max_output_tokens: int = 100
    caption_max_chars: int = Field(default=250, ge=1)
    video_caption_max_chars: int = Field(default=200, ge=1)
    timeout_seconds: float = 60.0
    retry_max_attempts: int = 3
    retry_base_seconds: float = 1.0
    retry_max_seconds: float = 20.0
    retry_jitter: float = 0.3


class TwitterConfig(BaseModel):
    """X/Twitter source configuration (bird CLI)."""

    handle: str = "tokenmetricsinc"
    window_size: int = 20
    image_mode: Literal["reference", "download"] = "reference"
    auth_token_env: str = "AUTH_TOKEN"
    ct0_env: str = "CT0"
    timeout_seconds: int = 60
    retry_max_attempts: int = 4
    retry_base_seconds: float = 15.0
    retry_max_seconds: float = 120.0


class YouTubeConfig(BaseModel):
    """YouTube Data API source configuration."""

    channel_id: str = "UCH9MOLQ_KUpZ_cw8uLGUisA"
    api_key_env: str = "YOUTUBE_API_KEY"
    shorts_only: bool = False
    timeout_seconds: float = 30.0


class MediaConfig(BaseModel):
    """Media downloader configuration."""

    downloader: str = "yt-dlp"
    image_timeout_seconds: float = 20.0
    image_strategies: list[str] = ["orig", "large", "medium"]
    timeout_seconds: int = 600
    format_strategies: list[str] = [
        "232+233-9/231+233-9/230+233-9",
        "232+233/231+233/230+233",
        "best[height<=720]",
        "best[ext=mp4]",
        "best",
    ]


class MintingConfig(BaseModel):
    """External mint command configuration."""

    command: list[str] = ["npx", "tsx", "mint-coin.ts"]
    creator_address_env: str = "ZORA_SMART_WALLET_ADDRESS"
    name_prefix: str = "tokenmetrics#"
    symbol_prefix: str = "TM"
    timeout_seconds: int = 300


class LedgerConfig(BaseModel):
    """Dedup ledger capacities per source modality."""

    image_capacity: int = 1000
    video_capacity: int = 100


class PathsConfig(BaseModel):
    """Paths configuration."""

    data_dir: str | None = None


class MintfeedConfig(BaseModel):
    """Top-level mintfeed configuration."""

    llm: LLMConfig = LLMConfig()
    twitter: TwitterConfig = TwitterConfig()
    youtube: YouTubeConfig = YouTubeConfig()
    media: MediaConfig = MediaConfig()
    minting: MintingConfig = MintingConfig()
    ledger: LedgerConfig = LedgerConfig()
    paths: PathsConfig = PathsConfig()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MintfeedConfig:
        return cls.model_validate(data)
