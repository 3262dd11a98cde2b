"""Media acquisition: ordered download strategies and direct image references."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Literal, Protocol
from urllib.parse import parse_qs, urlencode, urlparse, urlunparse

import httpx

from .errors import AcquisitionExhausted
from .models import MediaBundle, MediaDescriptor

log = logging.getLogger(__name__)

VIDEO_SUFFIXES = (".mp4", ".webm", ".mkv")
IMAGE_SUFFIXES = (".jpg", ".jpeg", ".png", ".webp")

MIME_TYPES = {
    ".mp4": "video/mp4",
    ".webm": "video/webm",
    ".mkv": "video/x-matroska",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
    ".gif": "image/gif",
}

Strategy = Callable[[str], Awaitable[MediaBundle]]


class DownloadError(Exception):
    """A single acquisition attempt failed."""


class Downloader(Protocol):
    async def download(
        self,
        source_item_id: str,
        format_spec: str,
        output_dir: Path,
        source_url: str | None = None,
    ) -> None: ...


def guess_mime_type(name: str, default: str = "application/octet-stream") -> str:
    return MIME_TYPES.get(Path(urlparse(name).path).suffix.lower(), default)


def sized_image_url(url: str, size: str) -> str:
    """Rewrite an X media URL to request a given size variant (``orig``, ``large``, ...)."""
    parsed = urlparse(url)
    query = parse_qs(parsed.query)

    image_format = query.get("format", [""])[0]
    path = parsed.path
    if not image_format:
        suffix = Path(parsed.path).suffix
        image_format = suffix.lstrip(".") if suffix else "jpg"
        if suffix:
            path = path[: -len(suffix)]

    return urlunparse((parsed.scheme, parsed.netloc, path, "", urlencode({"format": image_format, "name": size}), ""))


class YtDlpDownloader:
    """Runs ``yt-dlp`` for one format specification."""

    def __init__(
        self,
        executable: str = "yt-dlp",
        timeout: float = 600,
        url_for: Callable[[str], str] | None = None,
    ) -> None:
        self.executable = executable
        self.timeout = timeout
        self.url_for = url_for or (lambda video_id: f"https://www.youtube.com/watch?v={video_id}")

    def build_command(
        self,
        source_item_id: str,
        format_spec: str,
        output_dir: Path,
        source_url: str | None = None,
    ) -> list[str]:
        return [
            self.executable,
            source_url or self.url_for(source_item_id),
            "-f",
            format_spec,
            "-o",
            str(output_dir / f"{source_item_id}.%(ext)s"),
            "--write-thumbnail",
            "--convert-thumbnails",
            "jpg",
            "--no-playlist",
            "--merge-output-format",
            "mp4",
        ]

    async def download(
        self,
        source_item_id: str,
        format_spec: str,
        output_dir: Path,
        source_url: str | None = None,
    ) -> None:
        cmd = self.build_command(source_item_id, format_spec, output_dir, source_url)
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise DownloadError(f"{self.executable} spawn error: {e}") from e

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            raise DownloadError(f"{self.executable} timed out after {self.timeout:.0f}s") from None

        if proc.returncode != 0:
            err = stderr.decode("utf-8", errors="replace").strip()
            log.debug("%s stdout: %s", self.executable, stdout.decode("utf-8", errors="replace"))
            raise DownloadError(f"{self.executable} failed with exit code {proc.returncode}: {err[-500:]}")


class HttpImageDownloader:
    """Downloads one size variant of a remote image over HTTP."""

    def __init__(self, timeout: float = 20.0, client: httpx.AsyncClient | None = None) -> None:
        self.timeout = timeout
        self._client = client

    async def download(
        self,
        source_item_id: str,
        format_spec: str,
        output_dir: Path,
        source_url: str | None = None,
    ) -> None:
        if not source_url:
            raise DownloadError(f"no image URL for {source_item_id}")
        url = sized_image_url(source_url, format_spec)
        extension = parse_qs(urlparse(url).query).get("format", ["jpg"])[0]
        try:
            if self._client is not None:
                response = await self._client.get(url)
            else:
                async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
                    response = await client.get(url)
            response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise DownloadError(f"failed to download image '{url}': {e}") from e

        (output_dir / f"{source_item_id}.{extension}").write_bytes(response.content)


def _owned_by(path: Path, source_item_id: str) -> bool:
    return path.is_file() and path.name.startswith(f"{source_item_id}.")


def locate_outputs(source_item_id: str, output_dir: Path, with_thumbnail: bool = True) -> tuple[Path, Path | None]:
    """Find the primary file (and thumbnail) produced for *source_item_id*.

    Checks the expected ``<id>.mp4`` / ``<id>.jpg`` first, then scans the
    directory for files named after the id. Without a thumbnail the primary
    file is an image.
    """
    expected_primary = output_dir / (f"{source_item_id}.mp4" if with_thumbnail else f"{source_item_id}.jpg")
    expected_thumb = output_dir / f"{source_item_id}.jpg"
    if expected_primary.is_file() and (not with_thumbnail or expected_thumb.is_file()):
        return expected_primary, expected_thumb if with_thumbnail else None

    log.info("Searching %s for downloaded files of %s", output_dir, source_item_id)
    candidates = sorted(p for p in output_dir.iterdir() if _owned_by(p, source_item_id))
    primary_suffixes = VIDEO_SUFFIXES if with_thumbnail else IMAGE_SUFFIXES
    primary = (
        expected_primary
        if expected_primary.is_file()
        else next((p for p in candidates if p.suffix in primary_suffixes), None)
    )
    thumbnail = None
    if with_thumbnail:
        thumbnail = (
            expected_thumb if expected_thumb.is_file() else next((p for p in candidates if p.suffix in IMAGE_SUFFIXES), None)
        )

    if primary is None or (with_thumbnail and thumbnail is None):
        names = [p.name for p in candidates]
        raise DownloadError(f"downloaded files not found (primary={primary}, thumbnail={thumbnail}, files={names})")
    return primary, thumbnail


class MediaAcquirer:
    """Retrieves media for a source item; the first successful strategy wins.

    ``kind="video"`` expects a video plus thumbnail, ``kind="image"`` a single
    image file.
    """

    def __init__(self, downloader: Downloader, output_dir: Path, kind: Literal["video", "image"] = "video") -> None:
        self.downloader = downloader
        self.output_dir = Path(output_dir)
        self.kind = kind

    def strategy(self, format_spec: str, source_url: str | None = None) -> Strategy:
        """Return a strategy that downloads with *format_spec* and verifies the output."""

        async def _attempt(source_item_id: str) -> MediaBundle:
            await self.downloader.download(source_item_id, format_spec, self.output_dir, source_url)
            primary, thumbnail = locate_outputs(source_item_id, self.output_dir, with_thumbnail=self.kind == "video")
            default_mime = "video/mp4" if self.kind == "video" else "image/jpeg"
            return MediaBundle(
                mime_type=guess_mime_type(primary.name, default_mime),
                primary_file=primary,
                thumbnail_file=thumbnail,
            )

        return _attempt

    async def acquire(self, source_item_id: str, strategies: list[str], source_url: str | None = None) -> MediaBundle:
        """Try each format spec in order; raise ``AcquisitionExhausted`` if all fail."""
        self.output_dir.mkdir(parents=True, exist_ok=True)
        failures: list[tuple[str, str]] = []

        for idx, format_spec in enumerate(strategies, start=1):
            log.info("Trying format strategy %d/%d: %s", idx, len(strategies), format_spec)
            try:
                bundle = await self.strategy(format_spec, source_url)(source_item_id)
            except (DownloadError, OSError) as e:
                log.warning("Format strategy %d failed: %s", idx, e)
                failures.append((format_spec, str(e)))
                self.discard_partial(source_item_id)
                continue
            log.info("Acquired %s with strategy %d (%s)", bundle.primary_file, idx, format_spec)
            return bundle

        raise AcquisitionExhausted(source_item_id, failures)

    def discard_partial(self, source_item_id: str) -> None:
        if not self.output_dir.is_dir():
            return
        for path in self.output_dir.iterdir():
            if _owned_by(path, source_item_id):
                path.unlink(missing_ok=True)

    @staticmethod
    def remote_image(descriptor: MediaDescriptor) -> MediaBundle:
        """Reference a remote photo directly instead of downloading it."""
        if descriptor.kind != "photo" or not descriptor.url:
            raise ValueError(f"media {descriptor.media_key} is not a photo with a URL")
        return MediaBundle(
            mime_type=guess_mime_type(descriptor.url, "image/jpeg"),
            reference_uri=descriptor.url,
        )
