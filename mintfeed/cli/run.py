"""Run command."""

import asyncio
import sys

import rich_click as click
from rich.markup import escape

from ..config import load_settings
from ..errors import AlreadyProcessed, MintfeedError
from ._console import console
from ._helpers import _normalize_item_id_or_url


@click.command()
@click.argument("item_id_or_url", required=False)
@click.option("--source", type=click.Choice(["twitter", "youtube"]), default="twitter", help="Source platform")
def run(item_id_or_url: str | None, source: str):
    """Mint the newest unminted item, or ITEM_ID_OR_URL when given."""
    from ..processor import build_pipeline

    item_id = _normalize_item_id_or_url(item_id_or_url) if item_id_or_url else None

    try:
        config = load_settings()
        pipeline = build_pipeline(config, source)
        outcome = asyncio.run(pipeline.run(item_id))
    except AlreadyProcessed as e:
        console.print(f"[yellow]SKIP[/yellow] {escape(str(e))}")
        sys.exit(1)
    except MintfeedError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        sys.exit(1)

    console.print(f"[green]Minted[/green] {escape(outcome.name)} ({outcome.symbol})")
    console.print(f"  Transaction: {outcome.result.transaction_id}")
    console.print(f"  Address:     {outcome.result.artifact_address}")
    console.print(f"  Caption:     {escape(outcome.content.text)}")
    console.print(f"  Source:      {outcome.link}")
    if not outcome.dedup_recorded:
        console.print("[yellow]WARN[/yellow] Minted but not recorded in the ledger; the item may be minted again")
