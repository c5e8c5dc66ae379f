"""git-drip init command - set a repository up for the workflow."""

import click

from gitdrip.commands._utils import handle_errors
from gitdrip.context import DripContext
from gitdrip.logging import get_logger
from gitdrip.workflow.initializer import Initializer

logger = get_logger("init")


@click.command()
@click.option("--force", "-f", is_flag=True, help="Force reinitialization")
@click.option("--defaults", "-d", is_flag=True, help="Use default branch naming conventions")
@click.pass_obj
@handle_errors
def init(drip: DripContext, force: bool, defaults: bool) -> None:
    """Initialize a new git repo with support for the branching model.

    Creates the repository when needed, then asks for the master branch and
    the feature, release and hotfix prefixes.
    """
    master = Initializer(drip).run(force=force, defaults=defaults)
    logger.debug(f"init complete, master={master}")
