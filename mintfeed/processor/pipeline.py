"""Top-level orchestration: one candidate item from fetch to dedup commit."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal

from ..errors import AlreadyProcessed, LedgerError, MintingFailure, SourceFetchError
from ..fetcher import BirdSource, YouTubeSource, get_post_url, shorts_url
from ..ledger import DeduplicationStore
from ..media import MediaAcquirer
from ..minter import Minter, artifact_name, artifact_symbol
from ..models import (
    DedupRecord,
    FetchWindow,
    MediaBundle,
    MediaDescriptor,
    MintfeedConfig,
    MintRequest,
    MintResult,
    NormalizedContent,
    RunLogEntry,
    SourceItem,
)
from ..thread import ThreadReconstructor, is_thread_member
from ..writer import ContentNormalizer
from .runlog import RunLog
from .selection import first_photo, select_candidate

log = logging.getLogger(__name__)


@dataclass
class RunOutcome:
    """What a successful run produced."""

    item: SourceItem
    content: NormalizedContent
    result: MintResult
    name: str
    symbol: str
    link: str
    dedup_recorded: bool


class IntakePipeline:
    """Fetch, normalize, acquire, mint, and record one source item.

    Steps run strictly one after another; any fatal error aborts the run
    after releasing acquired media and writing a FAILED run-log entry.
    """

    def __init__(
        self,
        *,
        source: Literal["twitter", "youtube"],
        fetcher: BirdSource | YouTubeSource,
        normalizer: ContentNormalizer,
        acquirer: MediaAcquirer,
        minter: Minter,
        ledger: DeduplicationStore,
        run_log: RunLog,
        creator_address: str,
        config: MintfeedConfig,
    ) -> None:
        self.source = source
        self.fetcher = fetcher
        self.normalizer = normalizer
        self.reconstructor = ThreadReconstructor(normalizer)
        self.acquirer = acquirer
        self.minter = minter
        self.ledger = ledger
        self.run_log = run_log
        self.creator_address = creator_address
        self.config = config
        self._selected_id: str | None = None

    async def run(self, item_id: str | None = None) -> RunOutcome:
        """Run once, in targeted mode when *item_id* is given, else latest mode."""
        mode: Literal["latest", "targeted"] = "targeted" if item_id else "latest"
        log.info("Starting %s run (%s mode)", self.source, mode)
        self._selected_id = item_id
        try:
            outcome = await self._run(item_id)
        except AlreadyProcessed as e:
            log.info("Nothing new to mint: %s", e)
            self.run_log.append(
                RunLogEntry(
                    status="SKIPPED",
                    mode=mode,
                    source=self.source,
                    source_item_id=e.source_item_id,
                    error=str(e),
                    error_type=type(e).__name__,
                )
            )
            raise
        except Exception as e:
            log.error("%s run failed: %s", self.source, e)
            self.run_log.append(
                RunLogEntry(
                    status="FAILED",
                    mode=mode,
                    source=self.source,
                    source_item_id=self._selected_id,
                    error=str(e),
                    error_type=type(e).__name__,
                )
            )
            raise

        self.run_log.append(
            RunLogEntry(
                status="SUCCESS",
                mode=mode,
                source=self.source,
                source_item_id=outcome.item.id,
                root_item_id=outcome.content.root_item_id,
                name=outcome.name,
                transaction_id=outcome.result.transaction_id,
                artifact_address=outcome.result.artifact_address,
                original_text=outcome.item.text,
                processed_content=outcome.content.text,
                link=outcome.link,
                dedup_recorded=outcome.dedup_recorded,
            )
        )
        return outcome

    async def _run(self, item_id: str | None) -> RunOutcome:
        processed = self.ledger.load()
        log.info("Ledger holds %d minted items", len(processed))

        if self.source == "youtube":
            item = await self._fetch_video(item_id, processed)
            self._selected_id = item.id
            text = await self.normalizer.normalize_video(item.title or item.id, item.text)
            content = NormalizedContent(text=text, source_item_id=item.id, root_item_id=item.id)
            link = shorts_url(item.id)
            bundle = await self.acquirer.acquire(item.id, self.config.media.format_strategies)
        else:
            item, photo, window = await self._fetch_post(item_id, processed)
            self._selected_id = item.id
            content = await self.normalize_post(item, window.items)
            link = get_post_url(content.root_item_id, self._handle)
            if self.config.twitter.image_mode == "download":
                bundle = await self.acquirer.acquire(item.id, self.config.media.image_strategies, source_url=photo.url)
            else:
                bundle = self.acquirer.remote_image(photo)

        log.info("Caption: %s", content.text)
        log.info("Link to source: %s", link)

        name = artifact_name(item.id, self.config.minting.name_prefix, item.title if self.source == "youtube" else None)
        symbol = artifact_symbol(item.id, self.config.minting.symbol_prefix)
        result = await self._mint(bundle, content, name, symbol)

        dedup_recorded = self._commit(item, result, name)
        return RunOutcome(
            item=item,
            content=content,
            result=result,
            name=name,
            symbol=symbol,
            link=link,
            dedup_recorded=dedup_recorded,
        )

    @property
    def _handle(self) -> str:
        return self.config.twitter.handle.lstrip("@")

    async def _fetch_video(self, item_id: str | None, processed: set[str]) -> SourceItem:
        if item_id:
            item, _ = await self.fetcher.fetch_by_id(item_id)
            if item.id in processed:
                log.warning("%s was already minted; continuing in targeted mode", item.id)
            return item

        window = await self.fetcher.fetch_latest()
        item = window.items[0]
        if item.id in processed:
            raise AlreadyProcessed(item.id)
        return item

    async def _fetch_post(
        self, item_id: str | None, processed: set[str]
    ) -> tuple[SourceItem, MediaDescriptor, FetchWindow]:
        if not item_id:
            window = await self.fetcher.fetch_recent()
            item, photo = select_candidate(window, processed, self._handle)
            return item, photo, window

        item, media = await self.fetcher.fetch_by_id(item_id)
        if item.id in processed:
            log.warning("%s was already minted; continuing in targeted mode", item.id)
        photo = first_photo(media)
        if photo is None:
            raise SourceFetchError(f"Post {item.id} has no photo to mint")

        window = FetchWindow(items=[item], media=media)
        if is_thread_member(item):
            # Recent timeline supplies the rest of the thread
            recent = await self.fetcher.fetch_recent()
            window = FetchWindow(
                items=[item] + [w for w in recent.items if w.id != item.id],
                media=media + recent.media,
            )
        return item, photo, window

    async def normalize_post(self, item: SourceItem, window: list[SourceItem]) -> NormalizedContent:
        """Caption a post, summarizing its thread when the window holds one."""
        if not is_thread_member(item):
            log.info("Single post %s", item.id)
            text = await self.normalizer.normalize(item.text)
            return NormalizedContent(text=text, source_item_id=item.id, root_item_id=item.id)

        thread = self.reconstructor.reconstruct(item, window)
        if not thread.is_thread:
            log.info("Only one post of the thread is in the window; captioning %s alone", item.id)
            text = await self.normalizer.normalize(item.text)
            return NormalizedContent(text=text, source_item_id=item.id, root_item_id=item.id)

        log.info("Summarizing %d-post thread %s", len(thread.items), item.conversation_id)
        summary = await self.reconstructor.summarize(thread)
        text = await self.normalizer.normalize(summary, is_thread_summary=True)
        return NormalizedContent(
            text=text,
            source_item_id=item.id,
            root_item_id=self.reconstructor.root_reference(item, thread),
        )

    async def _mint(self, bundle: MediaBundle, content: NormalizedContent, name: str, symbol: str) -> MintResult:
        with bundle:
            request = MintRequest(
                creator_address=self.creator_address,
                name=name,
                symbol=symbol,
                description=content.text,
                image_reference=bundle.image_reference,
                video_reference=bundle.video_reference,
                mime_type=bundle.mime_type,
            )
            try:
                return await self.minter.mint(request)
            except MintingFailure:
                raise
            except Exception as e:
                raise MintingFailure(f"minting failed: {e}") from e

    def _commit(self, item: SourceItem, result: MintResult, name: str) -> bool:
        entry = DedupRecord(
            source_item_id=item.id,
            artifact_id=result.artifact_address,
            transaction_id=result.transaction_id,
            name=name,
        )
        try:
            self.ledger.record(entry)
        except LedgerError:
            log.exception("Minted %s but could not record it in the ledger", item.id)
            return False
        return True
