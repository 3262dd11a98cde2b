"""Thread detection and reconstruction from an already-fetched window."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .errors import ThreadReconstructionDegraded
from .models import REPLIED_TO, SourceItem, ThreadRecord

if TYPE_CHECKING:
    from .writer import ContentNormalizer

log = logging.getLogger(__name__)


def is_thread_member(item: SourceItem) -> bool:
    """Return True if *item* replies to something or sits inside a conversation."""
    return item.has_ref(REPLIED_TO) or item.conversation_id != item.id


def _chronological_key(item: SourceItem) -> tuple[bool, float]:
    # Undated items sort last; sorted() keeps fetch order for ties
    if item.created_at is None:
        return True, 0.0
    return False, item.created_at.timestamp()


def find_root(items: list[SourceItem]) -> SourceItem | None:
    for item in items:
        if not item.has_ref(REPLIED_TO):
            return item
    return None


def _require_root(item: SourceItem, thread: ThreadRecord) -> SourceItem:
    if thread.root is None:
        raise ThreadReconstructionDegraded(f"root of thread {item.conversation_id} is outside the fetch window")
    return thread.root


class ThreadReconstructor:
    """Rebuilds threads using only items present in the fetch window.

    The window is never paged for a missing root; when the root falls outside
    it the conversation id stands in as the attribution reference.
    """

    def __init__(self, normalizer: ContentNormalizer) -> None:
        self.normalizer = normalizer

    def is_thread_member(self, item: SourceItem) -> bool:
        return is_thread_member(item)

    def reconstruct(self, item: SourceItem, window: list[SourceItem]) -> ThreadRecord:
        members = [w for w in window if w.conversation_id == item.conversation_id]
        if len(members) <= 1:
            log.debug("Only one item of conversation %s in window", item.conversation_id)
            return ThreadRecord(items=[item], root=item)

        ordered = sorted(members, key=_chronological_key)
        root = find_root(ordered)
        log.info("Reconstructed thread %s with %d items", item.conversation_id, len(ordered))
        return ThreadRecord(items=ordered, root=root)

    def root_reference(self, item: SourceItem, thread: ThreadRecord) -> str:
        """Return the id used for attribution links."""
        try:
            return _require_root(item, thread).id
        except ThreadReconstructionDegraded as e:
            log.warning("%s; using conversation id %s", e, item.conversation_id)
            return item.conversation_id

    async def summarize(self, thread: ThreadRecord) -> str:
        """Summarize a thread, falling back to the earliest item's cleaned text."""
        thread_text = "\n".join(f"{idx}. {member.text}" for idx, member in enumerate(thread.items, start=1))
        return await self.normalizer.summarize_thread(thread_text, fallback_text=thread.earliest.text)
