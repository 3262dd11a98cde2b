"""Tests for media acquisition strategies."""

import asyncio
import sys

import httpx
import pytest

from builders import make_photo

from mintfeed.errors import AcquisitionExhausted
from mintfeed.media import (
    DownloadError,
    HttpImageDownloader,
    MediaAcquirer,
    YtDlpDownloader,
    guess_mime_type,
    locate_outputs,
    sized_image_url,
)
from mintfeed.models import MediaDescriptor


@pytest.fixture
def out_dir(tmp_path):
    path = tmp_path / "downloads"
    path.mkdir()
    return path


class ScriptedDownloader:
    """Fails for the format specs in *failing*, otherwise writes *outputs*."""

    def __init__(self, failing=(), outputs=("{id}.mp4", "{id}.jpg"), partial=False):
        self.failing = set(failing)
        self.outputs = outputs
        self.partial = partial
        self.calls: list[str] = []

    async def download(self, source_item_id, format_spec, output_dir, source_url=None):
        self.calls.append(format_spec)
        if format_spec in self.failing:
            if self.partial:
                (output_dir / f"{source_item_id}.mp4.part").write_bytes(b"partial")
            raise DownloadError(f"format {format_spec} unavailable")
        for name in self.outputs:
            (output_dir / name.format(id=source_item_id)).write_bytes(format_spec.encode())


def test_first_successful_strategy_wins_and_stops(out_dir):
    downloader = ScriptedDownloader(failing={"A", "B"})
    acquirer = MediaAcquirer(downloader, out_dir)

    bundle = asyncio.run(acquirer.acquire("vid123", ["A", "B", "C", "D"]))

    assert downloader.calls == ["A", "B", "C"]
    assert bundle.primary_file == out_dir / "vid123.mp4"
    assert bundle.thumbnail_file == out_dir / "vid123.jpg"
    assert bundle.primary_file.read_bytes() == b"C"
    assert bundle.mime_type == "video/mp4"
    assert bundle.video_reference == str(out_dir / "vid123.mp4")
    assert bundle.image_reference == str(out_dir / "vid123.jpg")


def test_failed_attempt_discards_partial_files(out_dir):
    downloader = ScriptedDownloader(failing={"A"}, partial=True)
    acquirer = MediaAcquirer(downloader, out_dir)

    asyncio.run(acquirer.acquire("vid123", ["A", "B"]))

    assert not (out_dir / "vid123.mp4.part").exists()


def test_all_strategies_failing_raises_exhausted(out_dir):
    downloader = ScriptedDownloader(failing={"A", "B"})
    acquirer = MediaAcquirer(downloader, out_dir)

    with pytest.raises(AcquisitionExhausted) as exc_info:
        asyncio.run(acquirer.acquire("vid123", ["A", "B"]))

    assert [spec for spec, _ in exc_info.value.failures] == ["A", "B"]
    assert list(out_dir.iterdir()) == []


def test_missing_thumbnail_counts_as_failure(out_dir):
    downloader = ScriptedDownloader(outputs=("{id}.mp4",))
    acquirer = MediaAcquirer(downloader, out_dir)

    with pytest.raises(AcquisitionExhausted):
        asyncio.run(acquirer.acquire("vid123", ["A"]))
    assert not (out_dir / "vid123.mp4").exists()


def test_locate_outputs_scans_for_alternate_extensions(out_dir):
    (out_dir / "vid123.webm").write_bytes(b"v")
    (out_dir / "vid123.webp").write_bytes(b"t")
    (out_dir / "other.mp4").write_bytes(b"x")

    primary, thumbnail = locate_outputs("vid123", out_dir)

    assert primary.name == "vid123.webm"
    assert thumbnail.name == "vid123.webp"
    assert guess_mime_type(primary.name) == "video/webm"


def test_bundle_release_deletes_owned_files(out_dir):
    acquirer = MediaAcquirer(ScriptedDownloader(), out_dir)
    bundle = asyncio.run(acquirer.acquire("vid123", ["A"]))
    files = bundle.owned_files

    with bundle:
        assert all(p.exists() for p in files)

    assert not any(p.exists() for p in files)
    bundle.release()


def test_remote_image_references_url():
    bundle = MediaAcquirer.remote_image(make_photo("3_abc", "https://pbs.twimg.com/media/abc.png"))
    assert bundle.reference_uri == "https://pbs.twimg.com/media/abc.png"
    assert bundle.image_reference == "https://pbs.twimg.com/media/abc.png"
    assert bundle.mime_type == "image/png"
    assert bundle.owned_files == []


def test_remote_image_rejects_video():
    with pytest.raises(ValueError):
        MediaAcquirer.remote_image(MediaDescriptor(media_key="7_v", kind="video", url="https://video.twimg.com/v.mp4"))


def test_sized_image_url_variants():
    assert (
        sized_image_url("https://pbs.twimg.com/media/ABC.jpg", "orig")
        == "https://pbs.twimg.com/media/ABC?format=jpg&name=orig"
    )
    assert (
        sized_image_url("https://pbs.twimg.com/media/ABC?format=png&name=small", "large")
        == "https://pbs.twimg.com/media/ABC?format=png&name=large"
    )


def test_http_image_strategies_fall_through_sizes(out_dir):
    requested: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        size = request.url.params.get("name")
        requested.append(size)
        if size == "orig":
            return httpx.Response(404)
        return httpx.Response(200, content=b"\xff\xd8image")

    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            acquirer = MediaAcquirer(HttpImageDownloader(client=client), out_dir, kind="image")
            return await acquirer.acquire(
                "1900", ["orig", "large", "medium"], source_url="https://pbs.twimg.com/media/ABC.jpg"
            )

    bundle = asyncio.run(run())

    assert requested == ["orig", "large"]
    assert bundle.primary_file == out_dir / "1900.jpg"
    assert bundle.thumbnail_file is None
    assert bundle.mime_type == "image/jpeg"
    assert bundle.video_reference is None
    assert bundle.image_reference == str(out_dir / "1900.jpg")


def test_malformed_image_url_exhausts_every_size(out_dir):
    requested: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(str(request.url))
        return httpx.Response(200, content=b"image")

    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            acquirer = MediaAcquirer(HttpImageDownloader(client=client), out_dir, kind="image")
            return await acquirer.acquire(
                "1", ["orig", "large"], source_url="https://pbs.twimg.com/media/a b\x00.jpg"
            )

    with pytest.raises(AcquisitionExhausted) as exc_info:
        asyncio.run(run())

    assert [spec for spec, _ in exc_info.value.failures] == ["orig", "large"]
    assert requested == []
    assert list(out_dir.iterdir()) == []


def test_http_image_downloader_requires_url(out_dir):
    with pytest.raises(DownloadError):
        asyncio.run(HttpImageDownloader().download("1", "orig", out_dir))


def test_ytdlp_command_line(out_dir):
    cmd = YtDlpDownloader().build_command("abcdefghijk", "best", out_dir)
    assert cmd[:4] == ["yt-dlp", "https://www.youtube.com/watch?v=abcdefghijk", "-f", "best"]
    assert str(out_dir / "abcdefghijk.%(ext)s") in cmd
    assert "--write-thumbnail" in cmd
    assert cmd[-2:] == ["--merge-output-format", "mp4"]


def test_ytdlp_nonzero_exit_raises_download_error(out_dir):
    # The interpreter exits non-zero when handed a URL as its script
    downloader = YtDlpDownloader(executable=sys.executable, timeout=30)
    with pytest.raises(DownloadError, match="exit code"):
        asyncio.run(downloader.download("abcdefghijk", "best", out_dir))


def test_ytdlp_missing_executable_raises_download_error(out_dir):
    downloader = YtDlpDownloader(executable=str(out_dir / "no-such-yt-dlp"))
    with pytest.raises(DownloadError, match="spawn"):
        asyncio.run(downloader.download("abcdefghijk", "best", out_dir))
