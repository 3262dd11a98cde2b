"""Shared Rich console instance and helpers."""

import logging

from rich.console import Console
from rich.logging import RichHandler

console = Console()


def status_icon(ok: bool) -> str:
    """Return a colored checkmark or cross for status output."""
    if ok:
        return "[green]✓[/green]"
    return "[red]✗[/red]"


def setup_logging(verbose: bool = False) -> None:
    """Route mintfeed log records through Rich on stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=True)],
        force=True,
    )
    # Keep SDK and HTTP transport chatter out of the run output
    for name in ("httpx", "httpcore", "openai", "anthropic", "google_genai"):
        logging.getLogger(name).setLevel(logging.WARNING)
