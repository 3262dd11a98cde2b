"""Pydantic models for normalized content, minting, and run bookkeeping."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class NormalizedContent(BaseModel):
    """Caption text plus the identifiers used for attribution."""

    text: str
    source_item_id: str
    root_item_id: str


class DedupRecord(BaseModel):
    """A source item that has been minted."""

    source_item_id: str
    artifact_id: str = ""
    transaction_id: str = ""
    name: str = ""
    posted_at: datetime = Field(default_factory=_utcnow)


class MintRequest(BaseModel):
    """Payload handed to the minting subsystem."""

    creator_address: str
    name: str
    symbol: str
    description: str
    image_reference: str
    video_reference: str | None = None
    mime_type: str = "image/jpeg"

    def to_wire(self) -> dict[str, Any]:
        return {
            "creatorAddress": self.creator_address,
            "name": self.name,
            "symbol": self.symbol,
            "description": self.description,
            "imageReference": self.image_reference,
            "videoReference": self.video_reference,
            "mimeType": self.mime_type,
        }


class MintResult(BaseModel):
    """Confirmation returned by the minting subsystem."""

    transaction_id: str
    artifact_address: str = ""


class RunLogEntry(BaseModel):
    """One line of the append-only run log."""

    timestamp: datetime = Field(default_factory=_utcnow)
    status: Literal["SUCCESS", "FAILED", "SKIPPED"]
    mode: Literal["latest", "targeted"]
    source: str
    source_item_id: str | None = None
    root_item_id: str | None = None
    name: str | None = None
    transaction_id: str | None = None
    artifact_address: str | None = None
    original_text: str | None = None
    processed_content: str | None = None
    link: str | None = None
    dedup_recorded: bool | None = None
    error: str | None = None
    error_type: str | None = None
