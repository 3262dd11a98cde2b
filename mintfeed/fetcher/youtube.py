"""YouTube Data API v3 access for a channel's uploads."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..errors import ConfigError, SourceFetchError
from ..models import FetchWindow, MediaDescriptor, SourceItem, YouTubeConfig

log = logging.getLogger(__name__)

API_BASE = "https://www.googleapis.com/youtube/v3"

# Largest first; not every upload has every variant
THUMBNAIL_PREFERENCE = ("maxres", "high", "medium", "default")


def shorts_playlist_id(channel_id: str) -> str:
    """Convert a channel id to the channel's Shorts playlist id."""
    if channel_id.startswith("UC"):
        return "UUSH" + channel_id[2:]
    raise ValueError(f"Invalid channel ID format: {channel_id}")


class RelatedPlaylists(BaseModel):
    uploads: str


class ContentDetails(BaseModel):
    related_playlists: RelatedPlaylists = Field(alias="relatedPlaylists")


class ApiItem(BaseModel):
    """One entry of an API list response; unknown fields are ignored."""

    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    snippet: dict[str, Any] = Field(default_factory=dict)
    content_details: ContentDetails | None = Field(default=None, alias="contentDetails")

    @property
    def resource_video_id(self) -> str | None:
        raw = self.snippet.get("resourceId")
        video_id = raw.get("videoId") if isinstance(raw, dict) else None
        return video_id if isinstance(video_id, str) else None


class ApiListResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    items: list[ApiItem] = Field(default_factory=list)


def pick_thumbnail(thumbnails: dict[str, Any] | None) -> str | None:
    if not isinstance(thumbnails, dict):
        return None
    for name in THUMBNAIL_PREFERENCE:
        variant = thumbnails.get(name)
        if isinstance(variant, dict) and variant.get("url"):
            return variant["url"]
    return None


def watch_url(video_id: str) -> str:
    return f"https://www.youtube.com/watch?v={video_id}"


def shorts_url(video_id: str) -> str:
    return f"https://youtube.com/shorts/{video_id}"


def parse_video(video_id: str, snippet: dict[str, Any]) -> tuple[SourceItem, list[MediaDescriptor]]:
    """Validate a video snippet into a ``SourceItem`` and its video descriptor."""
    published = snippet.get("publishedAt")
    created_at = None
    if isinstance(published, str):
        try:
            created_at = datetime.fromisoformat(published.replace("Z", "+00:00"))
        except ValueError:
            log.debug("Unparseable publishedAt for %s: %s", video_id, published)

    media_key = f"{video_id}:video"
    item = SourceItem(
        id=video_id,
        text=snippet.get("description") or "",
        title=snippet.get("title") or video_id,
        created_at=created_at,
        media_refs=[media_key],
        author_handle=snippet.get("channelTitle"),
        platform="youtube",
    )
    descriptor = MediaDescriptor(
        media_key=media_key,
        kind="video",
        url=watch_url(video_id),
        preview_image_url=pick_thumbnail(snippet.get("thumbnails")),
    )
    return item, [descriptor]


def _parse_checked(video_id: str, snippet: dict[str, Any]) -> tuple[SourceItem, list[MediaDescriptor]]:
    try:
        return parse_video(video_id, snippet)
    except ValidationError as e:
        raise SourceFetchError(f"Malformed snippet for video {video_id}: {e}") from e


class YouTubeSource:
    """Read-only access to one channel through the YouTube Data API."""

    def __init__(self, config: YouTubeConfig, api_key: str, client: httpx.AsyncClient | None = None) -> None:
        self.config = config
        self._api_key = api_key
        self._client = client

    async def _get(self, resource: str, params: dict[str, Any]) -> ApiListResponse:
        query = {**params, "key": self._api_key}
        url = f"{API_BASE}/{resource}"
        try:
            if self._client is not None:
                response = await self._client.get(url, params=query)
            else:
                async with httpx.AsyncClient(timeout=self.config.timeout_seconds) as client:
                    response = await client.get(url, params=query)
        except httpx.HTTPError as e:
            raise SourceFetchError(f"YouTube API request failed: {e}") from e

        if response.status_code == 403:
            log.error("YouTube API returned 403; the daily quota may be exhausted")
        if response.status_code != 200:
            raise SourceFetchError(f"YouTube API error: {response.status_code} {response.reason_phrase}")
        try:
            return ApiListResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise SourceFetchError(f"Unexpected YouTube API response from {resource}: {e}") from e

    async def _uploads_playlist_id(self) -> str:
        if self.config.shorts_only:
            try:
                return shorts_playlist_id(self.config.channel_id)
            except ValueError as e:
                raise ConfigError(f"youtube.channel_id: {e}") from e

        data = await self._get("channels", {"part": "contentDetails", "id": self.config.channel_id})
        if not data.items:
            raise SourceFetchError(f"Channel not found: {self.config.channel_id}")
        details = data.items[0].content_details
        if details is None:
            raise SourceFetchError(f"Channel {self.config.channel_id} has no uploads playlist")
        return details.related_playlists.uploads

    async def fetch_latest(self) -> FetchWindow:
        """Fetch the single newest upload of the channel."""
        playlist_id = await self._uploads_playlist_id()
        log.info("Reading newest item of playlist %s", playlist_id)
        data = await self._get(
            "playlistItems",
            {"part": "snippet", "playlistId": playlist_id, "maxResults": 1},
        )
        if not data.items:
            raise SourceFetchError("No videos found in channel")

        entry = data.items[0]
        video_id = entry.resource_video_id
        if not video_id:
            raise SourceFetchError("Playlist item has no video id")
        item, media = _parse_checked(video_id, entry.snippet)
        return FetchWindow(items=[item], media=media)

    async def fetch_by_id(self, video_id: str) -> tuple[SourceItem, list[MediaDescriptor]]:
        """Fetch one video by id."""
        data = await self._get("videos", {"part": "snippet", "id": video_id})
        if not data.items:
            raise SourceFetchError(f"Video not found: {video_id}")
        return _parse_checked(data.items[0].id or video_id, data.items[0].snippet)
