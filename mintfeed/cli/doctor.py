"""Doctor command."""

import shutil
import sys

import rich_click as click
from rich.panel import Panel

from ..auth import lookup_env
from ..config import get_config_path, get_data_dir, get_ledger_path, load_settings
from ..errors import ConfigError, LedgerError
from ..ledger import DeduplicationStore
from ..models import MintfeedConfig
from ..writer.llm_client import PROVIDER_KEYS
from ._console import console, status_icon


@click.command()
def doctor():
    """Check mintfeed dependencies and configuration.

    Verifies:
    - Config file is valid
    - bird, yt-dlp and the mint command are on PATH
    - API keys and credentials are set
    - Ledgers are readable
    """
    issues: list[str] = []
    warnings: list[str] = []

    console.print("Checking mintfeed configuration...\n")

    config_path = get_config_path()
    console.print(f"Config file: {config_path}")
    try:
        config = load_settings()
    except ConfigError as e:
        console.print(f"  {status_icon(False)} Config file invalid: {e}")
        issues.append("Fix or delete the config file")
        config = MintfeedConfig()
    else:
        if config_path.exists():
            console.print(f"  {status_icon(True)} Config file valid")
        else:
            console.print("  [yellow]WARN[/yellow] Config file not found (using defaults)")

    console.print("\nExecutables:")
    for name, hint in (
        ("bird", "Install the bird CLI to read posts"),
        (config.media.downloader, "Install yt-dlp to download videos"),
        (config.minting.command[0] if config.minting.command else "", "Install the mint command runtime"),
    ):
        path = shutil.which(name) if name else None
        if path:
            console.print(f"  {status_icon(True)} {name} found at {path}")
        else:
            console.print(f"  {status_icon(False)} {name or '(mint command)'} not found in PATH")
            issues.append(hint)

    console.print("\nCredentials:")
    required = [
        PROVIDER_KEYS.get(config.llm.provider, ""),
        config.minting.creator_address_env,
        config.twitter.auth_token_env,
        config.twitter.ct0_env,
    ]
    for key_name in filter(None, required):
        if lookup_env(key_name):
            console.print(f"  {status_icon(True)} {key_name} set")
        else:
            console.print(f"  {status_icon(False)} {key_name} not set")
            issues.append(f"Set {key_name} in the environment or ~/.env")

    if lookup_env(config.youtube.api_key_env):
        console.print(f"  {status_icon(True)} {config.youtube.api_key_env} set")
    else:
        console.print(f"  [yellow]WARN[/yellow] {config.youtube.api_key_env} not set (YouTube source disabled)")
        warnings.append(f"Set {config.youtube.api_key_env} to mint YouTube videos")

    try:
        data_dir = get_data_dir()
    except ConfigError:
        data_dir = None
    ledgers = [("twitter", config.ledger.image_capacity), ("youtube", config.ledger.video_capacity)]
    if data_dir is None:
        ledgers = []
    console.print(f"\nLedgers in {data_dir or '(unknown data directory)'}:")
    for source, capacity in ledgers:
        store = DeduplicationStore(get_ledger_path(source, data_dir), capacity)
        try:
            count = len(store)
        except LedgerError as e:
            console.print(f"  {status_icon(False)} {e}")
            issues.append(f"Repair or remove {store.path}")
            continue
        console.print(f"  {status_icon(True)} {source}: {count}/{capacity} entries")

    console.print("\n" + "=" * 50)
    if issues:
        console.print(
            Panel(
                "\n".join(f"  - {issue}" for issue in issues),
                title=f"{len(issues)} issue(s) found",
                border_style="red",
            )
        )
    if warnings:
        console.print(
            Panel(
                "\n".join(f"  - {warning}" for warning in warnings),
                title=f"{len(warnings)} warning(s)",
                border_style="yellow",
            )
        )
    if not issues and not warnings:
        console.print(f"{status_icon(True)} All checks passed.")
    if issues:
        sys.exit(1)
