"""Ledger commands."""

import sys

import rich_click as click
from rich.table import Table

from ..config import get_ledger_path, load_settings
from ..errors import ConfigError, LedgerError
from ..ledger import DeduplicationStore
from ._console import console
from ._helpers import _normalize_item_id_or_url

_SOURCE = click.Choice(["twitter", "youtube"])


def _open_ledger(source: str) -> DeduplicationStore:
    try:
        config = load_settings()
    except ConfigError as e:
        raise click.ClickException(str(e)) from e
    capacity = config.ledger.video_capacity if source == "youtube" else config.ledger.image_capacity
    return DeduplicationStore(get_ledger_path(source), capacity)


@click.group()
def ledger():
    """Inspect the dedup ledger of minted items."""
    pass


@ledger.command("show")
@click.option("--source", type=_SOURCE, default="twitter", help="Source platform")
@click.option("--limit", "-n", default=20, help="Number of most recent entries to show")
def ledger_show(source: str, limit: int):
    """Show the most recently minted items."""
    store = _open_ledger(source)
    try:
        records = store.records()
    except LedgerError as e:
        raise click.ClickException(str(e)) from e

    if not records:
        console.print(f"Ledger {store.path} is empty.")
        return

    table = Table(title=f"{source} ledger ({len(records)}/{store.capacity})")
    table.add_column("Item", style="bold")
    table.add_column("Name")
    table.add_column("Transaction")
    table.add_column("Posted at")
    for record in reversed(records[-limit:]):
        table.add_row(
            record.source_item_id,
            record.name or "-",
            record.transaction_id or "-",
            record.posted_at.strftime("%Y-%m-%d %H:%M"),
        )
    console.print(table)


@ledger.command("check")
@click.argument("item_id_or_url")
@click.option("--source", type=_SOURCE, default="twitter", help="Source platform")
def ledger_check(item_id_or_url: str, source: str):
    """Exit 0 if ITEM_ID_OR_URL has been minted, 1 otherwise."""
    item_id = _normalize_item_id_or_url(item_id_or_url)
    try:
        minted = _open_ledger(source).contains(item_id)
    except LedgerError as e:
        raise click.ClickException(str(e)) from e

    if minted:
        console.print(f"{item_id}: [green]minted[/green]")
        return
    console.print(f"{item_id}: [yellow]not minted[/yellow]")
    sys.exit(1)
