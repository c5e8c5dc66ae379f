"""git-drip feature, release and hotfix command groups."""

import click

from gitdrip.commands._utils import handle_errors
from gitdrip.constants import BranchCategory
from gitdrip.context import DripContext
from gitdrip.workflow.branches import BranchWorkflow
from gitdrip.workflow.finish import FinishWorkflow


def _branches(drip: DripContext, category: BranchCategory) -> BranchWorkflow:
    workflow = BranchWorkflow(drip, category)
    workflow.require_initialized()
    return workflow


def category_group(category: BranchCategory) -> click.Group:
    """Build the command group for one branch category.

    Args:
        category: Branch category the group manages

    Returns:
        Click group with list, start, describe, finish, delete, checkout,
        diff and rebase subcommands; listing is the default
    """
    kind = category.value

    @click.command("list")
    @click.option("--descriptions", "-d", is_flag=True, help="Show branch descriptions")
    @click.pass_obj
    @handle_errors
    def list_cmd(drip: DripContext, descriptions: bool) -> None:
        """List existing branches."""
        _branches(drip, category).list(descriptions=descriptions or drip.descriptions)

    @click.command()
    @click.option("--fetch", "-F", is_flag=True, help="Fetch from origin before performing local operation")
    @click.option("--describe", "-d", is_flag=True, help="Edit the branch description")
    @click.option("--message", "-m", default=None, help="Use the given description")
    @click.argument("name")
    @click.argument("base", required=False)
    @click.pass_obj
    @handle_errors
    def start(
        drip: DripContext,
        fetch: bool,
        describe: bool,
        message: str | None,
        name: str,
        base: str | None,
    ) -> None:
        """Start a new branch NAME from BASE (master by default)."""
        _branches(drip, category).start(name, base=base, message=message, fetch=fetch, describe=describe)

    @click.command()
    @click.option("--message", "-m", default=None, help="Use the given description")
    @click.argument("name", required=False)
    @click.pass_obj
    @handle_errors
    def describe(drip: DripContext, message: str | None, name: str | None) -> None:
        """Edit the description of a branch."""
        _branches(drip, category).describe(name, message=message)

    @click.command()
    @click.option("--fetch", "-F", is_flag=True, help="Fetch from origin before performing finish")
    @click.option("--rebase", "-r", is_flag=True, help="Rebase before merging")
    @click.option("--remote", "-R", is_flag=True, help="Delete the remote branch too")
    @click.option("--keep", "-k", is_flag=True, help="Keep the branch after performing finish")
    @click.option("--squash", "-S", is_flag=True, help="Squash the branch during merge")
    @click.option("--tag/--no-tag", default=None, help="Tag the finished branch")
    @click.argument("name", required=False)
    @click.pass_obj
    @handle_errors
    def finish(
        drip: DripContext,
        fetch: bool,
        rebase: bool,
        remote: bool,
        keep: bool,
        squash: bool,
        tag: bool | None,
        name: str | None,
    ) -> None:
        """Merge a branch into master and remove it."""
        _branches(drip, category)
        FinishWorkflow(drip, category).finish(
            name,
            fetch=fetch,
            rebase=rebase,
            remote=remote,
            keep=keep,
            squash=squash,
            tag=tag,
        )

    @click.command()
    @click.option("--remote", "-R", is_flag=True, help="Delete the remote branch too")
    @click.argument("name")
    @click.pass_obj
    @handle_errors
    def delete(drip: DripContext, remote: bool, name: str) -> None:
        """Delete a branch."""
        _branches(drip, category).delete(name, remote=remote)

    @click.command()
    @click.argument("name")
    @click.pass_obj
    @handle_errors
    def checkout(drip: DripContext, name: str) -> None:
        """Switch to a branch by name or unique prefix."""
        _branches(drip, category).checkout(name)

    @click.command()
    @click.argument("name", required=False)
    @click.pass_obj
    @handle_errors
    def diff(drip: DripContext, name: str | None) -> None:
        """Show all changes since the branch left master."""
        _branches(drip, category).diff(name)

    @click.command()
    @click.option("--interactive", "-i", is_flag=True, help="Do an interactive rebase")
    @click.argument("name", required=False)
    @click.pass_obj
    @handle_errors
    def rebase(drip: DripContext, interactive: bool, name: str | None) -> None:
        """Rebase a branch onto master."""
        _branches(drip, category).rebase(name, interactive=interactive)

    @click.group(name=kind, invoke_without_command=True, help=f"Manage {kind} branches.")
    @click.pass_context
    def group(ctx: click.Context) -> None:
        if ctx.invoked_subcommand is None:
            ctx.invoke(list_cmd, descriptions=False)

    group.add_command(list_cmd)
    group.add_command(start)
    group.add_command(describe)
    group.add_command(finish)
    group.add_command(delete)
    group.add_command(checkout)
    group.add_command(checkout, name="co")
    group.add_command(diff)
    group.add_command(rebase)
    return group


feature = category_group(BranchCategory.FEATURE)
release = category_group(BranchCategory.RELEASE)
hotfix = category_group(BranchCategory.HOTFIX)
