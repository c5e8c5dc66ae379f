"""git-drip version command."""

import click

from gitdrip import __version__
from gitdrip.commands._utils import handle_errors
from gitdrip.context import DripContext


@click.command()
@click.pass_obj
@handle_errors
def version(drip: DripContext) -> None:
    """Show version information."""
    drip.say(__version__)
