"""Post parsing from bird CLI (and X API v2 shaped) JSON payloads."""

from __future__ import annotations

import html
import re
from datetime import datetime
from typing import Any

from ..models import QUOTED, REPLIED_TO, RETWEETED, MediaDescriptor, ParentRef, SourceItem

_RT_PREFIX_RE = re.compile(r"^\s*RT\s+@([A-Za-z0-9_]{1,15}):")
_KIND_ALIASES = {
    "photo": "photo",
    "image": "photo",
    "video": "video",
    "animated_gif": "animated_gif",
    "gif": "animated_gif",
    "animatedimage": "animated_gif",
}


def parse_post(data: dict[str, Any]) -> tuple[SourceItem, list[MediaDescriptor]]:
    """Validate one raw post payload into a ``SourceItem`` and its media."""
    tweet_id = _extract_tweet_id(data)
    author_handle, _ = _extract_author(data)
    content = _extract_content(data)

    media = _extract_media(data)
    media_refs = [m.media_key for m in media]
    attachments = data.get("attachments") if isinstance(data.get("attachments"), dict) else {}
    for key in attachments.get("media_keys") or []:
        if str(key) not in media_refs:
            media_refs.append(str(key))

    item = SourceItem(
        id=tweet_id,
        text=content,
        created_at=_extract_created_at(data),
        conversation_id=_extract_conversation_id(data),
        parent_refs=_extract_parent_refs(data, content),
        media_refs=media_refs,
        author_handle=author_handle,
        platform="twitter",
    )
    return item, media


def parse_media_descriptor(item: dict[str, Any]) -> MediaDescriptor | None:
    """Parse one media entity; returns None when it has no usable key or URL."""
    kind = _normalize_kind(item.get("type") or item.get("media_type"))
    still_url = item.get("media_url_https") or item.get("media_url") or item.get("preview_image_url")
    if kind == "photo":
        url = still_url or item.get("url")
    else:
        variants = item.get("video_info", {}).get("variants", []) if isinstance(item.get("video_info"), dict) else []
        mp4 = [v for v in variants if isinstance(v, dict) and v.get("url")]
        url = mp4[0]["url"] if mp4 else item.get("url")

    key = item.get("media_key") or item.get("id_str") or item.get("media_id") or item.get("id") or url
    if not key:
        return None
    return MediaDescriptor(
        media_key=str(key),
        kind=kind,
        url=url,
        preview_image_url=still_url if kind != "photo" else None,
    )


def _normalize_kind(value: Any) -> str:
    return _KIND_ALIASES.get(str(value or "photo").lower(), "photo")


def _extract_tweet_id(data: dict[str, Any]) -> str:
    """Extract tweet ID from known bird/X payload variants."""
    return str(data.get("id") or data.get("id_str") or data.get("tweetId") or data.get("rest_id", ""))


def _extract_author(data: dict[str, Any]) -> tuple[str | None, str | None]:
    """Extract author handle/name from known payload variants."""
    author = data.get("author", {}) or data.get("user", {})
    legacy = data.get("legacy", {}) if isinstance(data.get("legacy"), dict) else {}

    handle = (
        author.get("username")
        or author.get("screen_name")
        or author.get("handle")
        or legacy.get("screen_name")
        or data.get("authorHandle")
    )
    name = author.get("name") or author.get("display_name") or legacy.get("name") or data.get("authorName")
    return handle, name


def _extract_content(data: dict[str, Any]) -> str:
    """Extract post text, preferring the long-form note text when present."""
    legacy = data.get("legacy", {}) if isinstance(data.get("legacy"), dict) else {}
    note_tweet = data.get("note_tweet", {}) if isinstance(data.get("note_tweet"), dict) else {}
    note_text = (
        note_tweet.get("note_tweet_results", {}).get("result", {}).get("text")
        if isinstance(note_tweet.get("note_tweet_results"), dict)
        else None
    )

    base_text = (
        data.get("text")
        or data.get("full_text")
        or data.get("content")
        or legacy.get("full_text")
        or legacy.get("text")
        or ""
    )
    if isinstance(note_text, str) and len(note_text) > len(base_text):
        return html.unescape(note_text)
    return html.unescape(base_text)


def _extract_created_at(data: dict[str, Any]) -> datetime | None:
    created_str = data.get("createdAt") or data.get("created_at")
    if not created_str:
        return None
    try:
        return datetime.fromisoformat(created_str.replace("Z", "+00:00"))
    except (ValueError, AttributeError):
        pass
    try:
        # Twitter's legacy format
        return datetime.strptime(created_str, "%a %b %d %H:%M:%S %z %Y")
    except (ValueError, TypeError):
        return None


def _extract_conversation_id(data: dict[str, Any]) -> str:
    legacy = data.get("legacy", {}) if isinstance(data.get("legacy"), dict) else {}
    return str(
        data.get("conversation_id_str")
        or data.get("conversationIdStr")
        or data.get("conversationId")
        or data.get("conversation_id")
        or legacy.get("conversation_id_str")
        or ""
    ).strip()


def _extract_parent_refs(data: dict[str, Any], content: str) -> list[ParentRef]:
    refs: list[ParentRef] = []
    seen: set[tuple[str, str]] = set()

    def _add(ref_type: str, ref_id: Any) -> None:
        ref_id = str(ref_id or "").strip()
        key = (ref_type, ref_id)
        if ref_id and key not in seen:
            seen.add(key)
            refs.append(ParentRef(type=ref_type, id=ref_id))

    # X API v2 shape
    for ref in data.get("referenced_tweets") or []:
        if isinstance(ref, dict) and ref.get("type"):
            _add(str(ref["type"]), ref.get("id"))

    legacy = data.get("legacy", {}) if isinstance(data.get("legacy"), dict) else {}
    _add(
        REPLIED_TO,
        data.get("in_reply_to_status_id_str")
        or data.get("in_reply_to_status_id")
        or data.get("inReplyToStatusId")
        or data.get("inReplyToStatusIdStr")
        or legacy.get("in_reply_to_status_id_str"),
    )

    quoted = data.get("quotedTweet") or data.get("quoted_status")
    if isinstance(quoted, dict):
        _add(QUOTED, quoted.get("id") or quoted.get("id_str") or "quoted")

    retweeted = data.get("retweetedTweet") or data.get("retweeted_status") or data.get("retweetedStatus")
    if isinstance(retweeted, dict):
        _add(RETWEETED, retweeted.get("id") or retweeted.get("id_str") or "retweeted")
    elif _RT_PREFIX_RE.match(content or ""):
        _add(RETWEETED, "retweeted")

    return refs


def _extract_media(data: dict[str, Any]) -> list[MediaDescriptor]:
    candidates: list[dict[str, Any]] = []

    def _extend(value: Any) -> None:
        if isinstance(value, list):
            for item in value:
                if isinstance(item, dict):
                    candidates.append(item)

    _extend((data.get("extended_entities") or {}).get("media"))
    _extend((data.get("entities") or {}).get("media"))
    _extend(data.get("media"))

    media: list[MediaDescriptor] = []
    seen: set[str] = set()
    for candidate in candidates:
        descriptor = parse_media_descriptor(candidate)
        if descriptor is None or descriptor.media_key in seen:
            continue
        seen.add(descriptor.media_key)
        media.append(descriptor)
    return media
