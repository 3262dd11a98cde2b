"""Append-only NDJSON log of run outcomes, read by external monitoring."""

from __future__ import annotations

import logging
from pathlib import Path

from ..models import RunLogEntry

log = logging.getLogger(__name__)


class RunLog:
    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def append(self, entry: RunLogEntry) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "a") as f:
            f.write(entry.model_dump_json(exclude_none=True) + "\n")
        log.debug("Run log: %s %s", entry.status, entry.source_item_id or "")
