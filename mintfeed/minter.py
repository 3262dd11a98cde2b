"""Hand-off to the external minting subsystem."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Protocol

from pydantic import ValidationError

from .auth import get_auth_env
from .errors import MintingFailure
from .models import MintingConfig, MintRequest, MintResult

log = logging.getLogger(__name__)

ID_SUFFIX_LENGTH = 6


def artifact_name(source_item_id: str, prefix: str, title: str | None = None) -> str:
    """Name an artifact: the video title when there is one, else prefix + id suffix."""
    if title:
        return title
    return f"{prefix}{source_item_id[-ID_SUFFIX_LENGTH:]}"


def artifact_symbol(source_item_id: str, prefix: str) -> str:
    return f"{prefix}{source_item_id[-ID_SUFFIX_LENGTH:].upper()}"


class Minter(Protocol):
    async def mint(self, request: MintRequest) -> MintResult: ...


def _parse_mint_output(stdout: str) -> MintResult:
    """Read the result from the last JSON object line of the command output."""
    for line in reversed(stdout.strip().splitlines()):
        line = line.strip()
        if not line.startswith("{"):
            continue
        try:
            data = json.loads(line)
        except json.JSONDecodeError:
            continue
        try:
            return MintResult(
                transaction_id=data.get("transactionId") or data.get("hash") or "",
                artifact_address=data.get("artifactAddress") or data.get("address") or "",
            )
        except ValidationError as e:
            raise MintingFailure(f"mint command returned an invalid result: {e}") from e
    raise MintingFailure("mint command produced no JSON result")


class CommandMinter:
    """Runs an external mint command, exchanging JSON over stdin/stdout.

    The command receives the request (camelCase keys) on stdin and must print
    ``{"transactionId": ..., "artifactAddress": ...}`` as its last JSON line.
    """

    def __init__(self, config: MintingConfig) -> None:
        if not config.command:
            raise ValueError("minting.command is empty")
        self.config = config

    async def mint(self, request: MintRequest) -> MintResult:
        payload = json.dumps(request.to_wire()).encode()
        log.info("Minting %s (%s) via %s", request.name, request.symbol, self.config.command[0])
        try:
            proc = await asyncio.create_subprocess_exec(
                *self.config.command,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=get_auth_env(),
            )
        except OSError as e:
            raise MintingFailure(f"cannot start mint command: {e}") from e

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(payload), timeout=self.config.timeout_seconds)
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            raise MintingFailure(f"mint command timed out after {self.config.timeout_seconds}s") from None

        if proc.returncode != 0:
            err = stderr.decode("utf-8", errors="replace").strip()
            raise MintingFailure(f"mint command exited with code {proc.returncode}: {err[-500:]}")

        result = _parse_mint_output(stdout.decode("utf-8", errors="replace"))
        if not result.transaction_id:
            raise MintingFailure("mint command returned no transaction id")
        log.info("Minted %s: tx %s, address %s", request.name, result.transaction_id, result.artifact_address)
        return result
