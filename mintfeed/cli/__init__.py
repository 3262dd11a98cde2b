"""CLI entry point for mintfeed."""

import rich_click as click

from .. import __version__

# Import command modules; avoid shadowing module names with command objects
# so that `import mintfeed.cli.<module>` still resolves to the module.
from . import config_cmd as _config_mod
from . import doctor as _doctor_mod
from . import ledger_cmd as _ledger_mod
from . import run as _run_mod
from ._console import setup_logging


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool):
    """Republish tweets and YouTube Shorts as minted content coins."""
    setup_logging(verbose)


# Register commands
cli.add_command(_run_mod.run)
cli.add_command(_ledger_mod.ledger)
cli.add_command(_config_mod.config)
cli.add_command(_doctor_mod.doctor)


if __name__ == "__main__":
    cli()
