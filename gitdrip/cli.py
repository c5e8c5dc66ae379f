"""git-drip command-line interface."""

import click

from gitdrip import __version__
from gitdrip.commands import feature, hotfix, init, release, version
from gitdrip.commands._utils import handle_errors
from gitdrip.config import DripSettings
from gitdrip.context import DripContext
from gitdrip.git.repo import Repository
from gitdrip.logging import get_logger, level_for_verbosity, setup_logging

logger = get_logger("cli")


@click.group()
@click.version_option(version=__version__, prog_name="git-drip")
@click.option("--verbose", "-v", count=True, help="Echo git commands (twice: queries and debug logs too)")
@click.option("--no-run", "-n", "dry_run", is_flag=True, help="Print the git commands without running them")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Preferences file (default: .gitdrip.yaml in cwd, repo root or home)",
)
@click.pass_context
@handle_errors
def cli(ctx: click.Context, verbose: int, dry_run: bool, config_path: str | None) -> None:
    """git-drip - a lightweight git branching workflow.

    Feature, release and hotfix branches are started from and finished
    into a single master branch.
    """
    drip = DripContext(verbose=verbose, dry_run=dry_run)

    if config_path is None:
        settings_path = DripSettings.find(Repository(drip).git_root())
    else:
        settings_path = config_path
    settings = DripSettings.load(settings_path)

    drip.verbose = max(verbose, settings.verbose)
    drip.descriptions = settings.descriptions

    level = level_for_verbosity(drip.verbose) if drip.verbose > 1 else settings.logging.level
    setup_logging(
        level=level,
        log_dir=settings.logging.directory,
        json_output=settings.logging.json_output,
    )
    logger.debug(f"Settings loaded from {settings_path or 'defaults'}")

    ctx.obj = drip


# Register commands
cli.add_command(init)
cli.add_command(version)
cli.add_command(feature)
cli.add_command(release)
cli.add_command(hotfix)


def main() -> None:
    """Console script entry point."""
    cli(prog_name="git-drip")


if __name__ == "__main__":
    main()
