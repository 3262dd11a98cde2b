"""Candidate selection over a fetched timeline window."""

from __future__ import annotations

import logging
import re

from ..errors import AlreadyProcessed, NoEligibleCandidate
from ..models import QUOTED, RETWEETED, FetchWindow, MediaDescriptor, SourceItem

log = logging.getLogger(__name__)

_LEADING_MENTION_RE = re.compile(r"^@(\w+)")


def is_reply_to_other(item: SourceItem, handle: str) -> bool:
    """A post opening with a mention of another account is a reply to them.

    Self-replies (threads) are allowed through.
    """
    match = _LEADING_MENTION_RE.match(item.text)
    return bool(match) and match.group(1).lower() != handle.lstrip("@").lower()


def first_photo(media: list[MediaDescriptor]) -> MediaDescriptor | None:
    return next((m for m in media if m.kind == "photo" and m.url), None)


def skip_reason(item: SourceItem, media: list[MediaDescriptor], handle: str) -> str | None:
    """Return why *item* cannot be minted as an image post, or None."""
    if is_reply_to_other(item, handle):
        return "reply to other user"
    if item.text.startswith("RT @") or item.has_ref(RETWEETED):
        return "retweet"
    if item.has_ref(QUOTED):
        return "quote tweet"
    if not item.media_refs:
        return "no media attachments"
    if any(m.kind in ("video", "animated_gif") for m in media):
        return "contains video/gif"
    if first_photo(media) is None:
        return "no photo media found"
    return None


def select_candidate(window: FetchWindow, processed: set[str], handle: str) -> tuple[SourceItem, MediaDescriptor]:
    """Pick the newest eligible, unprocessed image post from *window*.

    Raises ``AlreadyProcessed`` when every otherwise-eligible post has been
    minted already, ``NoEligibleCandidate`` when nothing qualifies at all.
    """
    skipped_processed: list[str] = []
    for item in window.items:
        if item.id in processed:
            log.debug("Skipping %s: already minted", item.id)
            skipped_processed.append(item.id)
            continue

        media = window.media_for(item)
        reason = skip_reason(item, media, handle)
        photo = first_photo(media)
        if reason or photo is None:
            log.debug("Skipping %s: %s", item.id, reason)
            continue

        log.info("Selected post %s (%s)", item.id, item.created_at)
        return item, photo

    if skipped_processed:
        raise AlreadyProcessed(skipped_processed[0])
    raise NoEligibleCandidate(
        f"No valid image posts in the {len(window.items)} most recent posts "
        "(all filtered: replies/retweets/quotes/videos/no photo)"
    )
