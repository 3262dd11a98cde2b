"""Bird CLI interaction: subprocess execution, retry, and fetch commands."""

from __future__ import annotations

import asyncio
import json
import logging
import random
from typing import Any

from ..auth import get_auth_env
from ..errors import SourceFetchError
from ..models import FetchWindow, MediaDescriptor, SourceItem, TwitterConfig
from .extractors import parse_post

log = logging.getLogger(__name__)


def _is_rate_limited(stderr: str) -> bool:
    """Check if bird CLI stderr indicates a 429 rate limit."""
    return "429" in stderr or "Rate limit" in stderr or "rate limit" in stderr


async def _run_bird_once(cmd: list[str], env: dict[str, str], args: list[str], timeout: int) -> tuple[str, str, int]:
    """Execute a single bird CLI subprocess call."""
    try:
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env=env,
        )
    except FileNotFoundError:
        log.error("bird CLI not found on PATH")
        return "", "bird CLI not found", 1

    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        proc.kill()
        await proc.wait()
        log.error("bird %s timed out after %ds", args[0] if args else "?", timeout)
        return "", "Command timed out", 1

    out = stdout.decode("utf-8", errors="replace")
    err = stderr.decode("utf-8", errors="replace")
    returncode = proc.returncode or 0
    if err.strip():
        meaningful = [ln for ln in err.strip().splitlines() if not ln.strip().startswith("ℹ")]
        if meaningful:
            level = logging.WARNING if returncode == 0 else logging.ERROR
            log.log(level, "bird %s stderr: %s", args[0] if args else "?", "\n".join(meaningful))
    if returncode != 0:
        log.error("bird %s exited with code %d", args[0] if args else "?", returncode)
    return out, err, returncode


async def run_bird(args: list[str], config: TwitterConfig) -> tuple[str, str, int]:
    """Run bird CLI command with retry on rate limit, returning (stdout, stderr, returncode)."""
    env = get_auth_env()
    cmd = ["bird", *args]

    auth_token = env.get(config.auth_token_env)
    ct0 = env.get(config.ct0_env)
    if auth_token and "--auth-token" not in args:
        cmd.extend(["--auth-token", auth_token])
    if ct0 and "--ct0" not in args:
        cmd.extend(["--ct0", ct0])

    max_attempts = max(1, config.retry_max_attempts)
    for attempt in range(max_attempts):
        stdout, stderr, returncode = await _run_bird_once(cmd, env, args, config.timeout_seconds)

        if returncode == 0 or not _is_rate_limited(stderr):
            return stdout, stderr, returncode

        if attempt + 1 >= max_attempts:
            log.error("bird %s rate-limited after %d attempts, giving up", args[0], max_attempts)
            break

        delay = min(config.retry_base_seconds * (2**attempt), config.retry_max_seconds)
        wait = delay + random.uniform(0, delay * 0.25)
        log.warning("bird %s rate-limited (attempt %d/%d), retrying in %.0fs", args[0], attempt + 1, max_attempts, wait)
        await asyncio.sleep(wait)

    return stdout, stderr, returncode


def _parse_bird_output(stdout: str) -> FetchWindow:
    """Parse bird JSON output into a fetch window.

    Handles a complete JSON array, a single object, and NDJSON. Items keep
    the order bird emitted them in (newest first for timelines).
    """
    window = FetchWindow()
    if not stdout.strip():
        return window

    seen_media: set[str] = set()

    def _append_item(item: Any) -> None:
        if not isinstance(item, dict):
            return
        post, media = parse_post(item)
        if not post.id:
            return
        window.items.append(post)
        for descriptor in media:
            if descriptor.media_key not in seen_media:
                seen_media.add(descriptor.media_key)
                window.media.append(descriptor)

    try:
        data = json.loads(stdout)
    except json.JSONDecodeError:
        for line in stdout.strip().split("\n"):
            line = line.strip()
            if not line:
                continue
            try:
                item = json.loads(line)
            except json.JSONDecodeError:
                continue
            if isinstance(item, list):
                for i in item:
                    _append_item(i)
            else:
                _append_item(item)
        return window

    if isinstance(data, list):
        for item in data:
            _append_item(item)
    else:
        _append_item(data)
    return window


class BirdSource:
    """Read-only access to one account's posts through the bird CLI."""

    def __init__(self, config: TwitterConfig) -> None:
        self.config = config

    @property
    def handle(self) -> str:
        return self.config.handle.lstrip("@")

    async def fetch_recent(self, count: int | None = None) -> FetchWindow:
        """Fetch the account's most recent posts, newest first."""
        count = count or self.config.window_size
        stdout, stderr, code = await run_bird(
            ["user-tweets", f"@{self.handle}", "-n", str(count), "--json"],
            self.config,
        )
        if code != 0:
            raise SourceFetchError(f"bird user-tweets failed for @{self.handle} (exit {code}): {stderr.strip()}")

        window = _parse_bird_output(stdout)
        if not window.items:
            raise SourceFetchError(f"No posts found for @{self.handle}")
        return window

    async def fetch_by_id(self, item_id: str) -> tuple[SourceItem, list[MediaDescriptor]]:
        """Fetch a single post by id."""
        stdout, stderr, code = await run_bird(["read", item_id, "--json"], self.config)
        if code != 0:
            raise SourceFetchError(f"bird read failed for {item_id} (exit {code}): {stderr.strip()}")

        window = _parse_bird_output(stdout)
        if not window.items:
            raise SourceFetchError(f"bird read returned no parseable post for {item_id}")
        item = window.items[0]
        return item, window.media_for(item)


def get_post_url(item_id: str, author_handle: str = "i") -> str:
    """Construct a post URL."""
    handle = author_handle.lstrip("@")
    return f"https://x.com/{handle}/status/{item_id}"
