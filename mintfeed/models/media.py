"""Acquired media owned by a single pipeline run."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

log = logging.getLogger(__name__)


@dataclass
class MediaBundle:
    """Primary media plus optional thumbnail, or a remote reference.

    Local files belong to the run that acquired them; ``release()`` deletes
    them and is safe to call more than once.
    """

    mime_type: str
    primary_file: Path | None = None
    thumbnail_file: Path | None = None
    reference_uri: str | None = None

    @property
    def owned_files(self) -> list[Path]:
        return [p for p in (self.primary_file, self.thumbnail_file) if p is not None]

    @property
    def image_reference(self) -> str:
        """Reference for the artifact's still image."""
        if self.reference_uri:
            return self.reference_uri
        if self.thumbnail_file:
            return str(self.thumbnail_file)
        if self.primary_file:
            return str(self.primary_file)
        raise ValueError("media bundle has no image")

    @property
    def video_reference(self) -> str | None:
        if self.primary_file and self.mime_type.startswith("video/"):
            return str(self.primary_file)
        return None

    def release(self) -> None:
        for path in self.owned_files:
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                log.warning("Failed to remove %s: %s", path, e)
        self.primary_file = None
        self.thumbnail_file = None

    def __enter__(self) -> MediaBundle:
        return self

    def __exit__(self, *exc_info) -> None:
        self.release()
