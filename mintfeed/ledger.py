"""Capacity-bounded JSON ledger of source items that have been minted."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from .errors import LedgerError
from .models import DedupRecord

log = logging.getLogger(__name__)


class DeduplicationStore:
    """Ordered ``DedupRecord`` entries persisted as a JSON array.

    Every ``record()`` rewrites the whole file (read-modify-write). There is
    no locking: two overlapping runs can lose one another's update.
    """

    def __init__(self, path: Path, capacity: int) -> None:
        if capacity < 1:
            raise ValueError("ledger capacity must be at least 1")
        self.path = Path(path)
        self.capacity = capacity

    def records(self) -> list[DedupRecord]:
        """Return all persisted records, oldest first."""
        if not self.path.exists():
            return []
        try:
            raw = json.loads(self.path.read_text())
        except (OSError, json.JSONDecodeError) as e:
            raise LedgerError(f"cannot read ledger {self.path}: {e}") from e
        if not isinstance(raw, list):
            raise LedgerError(f"ledger {self.path} is not a JSON array")
        try:
            return [DedupRecord.model_validate(item) for item in raw]
        except ValidationError as e:
            raise LedgerError(f"ledger {self.path} holds an invalid record: {e}") from e

    def load(self) -> set[str]:
        """Return the set of recorded source item ids."""
        return {record.source_item_id for record in self.records()}

    def contains(self, source_item_id: str) -> bool:
        return source_item_id in self.load()

    def record(self, entry: DedupRecord) -> None:
        """Append *entry* and evict the oldest records beyond capacity.

        An existing entry with the same id is replaced, so re-minting an item
        moves it to the newest position instead of duplicating it.
        """
        records = [r for r in self.records() if r.source_item_id != entry.source_item_id]
        records.append(entry)
        if len(records) > self.capacity:
            records = records[-self.capacity :]

        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = [r.model_dump(mode="json") for r in records]
        try:
            self.path.write_text(json.dumps(payload, indent=2))
        except OSError as e:
            raise LedgerError(f"cannot write ledger {self.path}: {e}") from e
        log.info("Recorded %s in ledger (%d/%d entries)", entry.source_item_id, len(records), self.capacity)

    def __len__(self) -> int:
        return len(self.records())
