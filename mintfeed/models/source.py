"""Pydantic models for source items fetched from a platform."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, model_validator

REPLIED_TO = "replied_to"
QUOTED = "quoted"
RETWEETED = "retweeted"


class ParentRef(BaseModel):
    """A reply/quote/repost relationship to another item."""

    model_config = ConfigDict(frozen=True)

    type: str
    id: str


class SourceItem(BaseModel):
    """One unit of externally authored content, read-only once fetched."""

    model_config = ConfigDict(frozen=True)

    id: str
    text: str = ""
    created_at: datetime | None = None
    conversation_id: str = ""
    parent_refs: list[ParentRef] = []
    media_refs: list[str] = []
    author_handle: str | None = None
    title: str | None = None
    platform: Literal["twitter", "youtube"] = "twitter"

    @model_validator(mode="before")
    @classmethod
    def _default_conversation(cls, data: Any) -> Any:
        # A root item is its own conversation
        if isinstance(data, dict) and not data.get("conversation_id"):
            data = {**data, "conversation_id": data.get("id")}
        return data

    def has_ref(self, ref_type: str) -> bool:
        return any(ref.type == ref_type for ref in self.parent_refs)


class MediaDescriptor(BaseModel):
    """Media attached to a source item."""

    model_config = ConfigDict(frozen=True)

    media_key: str
    kind: str = "photo"
    url: str | None = None
    preview_image_url: str | None = None


class FetchWindow(BaseModel):
    """The bounded set of items (and their media) returned by one fetch."""

    items: list[SourceItem] = []
    media: list[MediaDescriptor] = []

    def media_for(self, item: SourceItem) -> list[MediaDescriptor]:
        """Return the descriptors referenced by *item*, in reference order."""
        by_key = {m.media_key: m for m in self.media}
        return [by_key[key] for key in item.media_refs if key in by_key]

    def get(self, item_id: str) -> SourceItem | None:
        for item in self.items:
            if item.id == item_id:
                return item
        return None


class ThreadRecord(BaseModel):
    """Items sharing one conversation id, ascending by ``created_at``."""

    items: list[SourceItem]
    root: SourceItem | None = None

    @property
    def is_thread(self) -> bool:
        return len(self.items) > 1

    @property
    def earliest(self) -> SourceItem:
        return self.items[0]
