"""Builders for source items and media descriptors used across tests."""

from datetime import datetime, timedelta, timezone

from mintfeed.models import REPLIED_TO, MediaDescriptor, ParentRef, SourceItem

BASE_TIME = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)


def make_post(
    item_id: str,
    text: str = "Market update",
    minutes: int | None = 0,
    conversation_id: str = "",
    reply_to: str | None = None,
    media_refs: list[str] | None = None,
    parent_refs: list[ParentRef] | None = None,
) -> SourceItem:
    refs = list(parent_refs or [])
    if reply_to:
        refs.append(ParentRef(type=REPLIED_TO, id=reply_to))
    return SourceItem(
        id=item_id,
        text=text,
        created_at=None if minutes is None else BASE_TIME + timedelta(minutes=minutes),
        conversation_id=conversation_id,
        parent_refs=refs,
        media_refs=media_refs or [],
        author_handle="tokenmetricsinc",
    )


def make_photo(media_key: str, url: str | None = None) -> MediaDescriptor:
    return MediaDescriptor(
        media_key=media_key,
        kind="photo",
        url=url or f"https://pbs.twimg.com/media/{media_key}.jpg",
    )
