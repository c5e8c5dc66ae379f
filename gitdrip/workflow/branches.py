"""Start, list, describe and maintain feature, release and hotfix branches."""

from __future__ import annotations

from typing import TYPE_CHECKING

from gitdrip.constants import HEAD, BranchCategory
from gitdrip.exceptions import AmbiguousBranchError, BranchNotFoundError, GitError, PreconditionError
from gitdrip.git.compare import require_equal
from gitdrip.git.repo import Repository
from gitdrip.git.types import Branch
from gitdrip.logging import get_logger
from gitdrip.workflow.initializer import require_initialized

if TYPE_CHECKING:
    from gitdrip.context import DripContext

logger = get_logger("workflow.branches")

# Name padding after the longest branch name in listings
LIST_PADDING = 3


class BranchWorkflow:
    """Operations on the branches of one category.

    The category decides the configured prefix, the wording of messages and
    the kind of state notes shown in verbose listings.
    """

    def __init__(
        self,
        ctx: DripContext,
        category: BranchCategory,
        repo: Repository | None = None,
    ) -> None:
        self.ctx = ctx
        self.category = category
        self.repo = repo or Repository(ctx)

    @property
    def prefix(self) -> str:
        """Configured prefix of this category."""
        return self.ctx.workflow().prefix_for(self.category)

    @property
    def master(self) -> str:
        """Configured master branch."""
        return self.ctx.workflow().master

    @property
    def remote(self) -> str:
        """Configured remote name."""
        return self.ctx.workflow().origin

    def require_initialized(self) -> None:
        """Raise NotInitializedError unless the repository is set up."""
        require_initialized(self.ctx, self.repo)

    # ------------------------------------------------------------------
    # Name resolution
    # ------------------------------------------------------------------

    def resolve(self, name: str) -> Branch:
        """Find the category branch a name or unique name prefix refers to.

        Args:
            name: Branch name without the category prefix

        Returns:
            The matching branch

        Raises:
            BranchNotFoundError: If nothing matches
            AmbiguousBranchError: If the prefix matches several branches
        """
        wanted = Branch(name, self.prefix)
        branches = self.repo.prefixed_branches(self.prefix)
        if any(b.prefixed_name == wanted.prefixed_name for b in branches):
            return wanted

        matches = [b for b in branches if b.prefixed_name.startswith(wanted.prefixed_name)]
        if not matches:
            raise BranchNotFoundError(f"No branch matches prefix {name}", wanted.prefixed_name)
        if len(matches) > 1:
            raise AmbiguousBranchError(name, [b.prefixed_name for b in matches])
        return matches[0]

    def resolve_or_current(self, name: str | None) -> Branch:
        """Resolve a name, or use the checked out branch when none is given.

        Raises:
            PreconditionError: If the current branch is not of this category
        """
        if name:
            return self.resolve(name)

        current = self.repo.current_branch()
        prefix = self.prefix
        if current is None or current.detached_head or current.prefix != prefix or not prefix:
            raise PreconditionError(
                f"The current HEAD is not a {self.category.value} branch.\n"
                "Please specify a <name> argument"
            )
        return current

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    def list(self, descriptions: bool = False) -> list[Branch]:
        """Print the category's branches.

        Args:
            descriptions: Also show branch descriptions

        Returns:
            The listed branches
        """
        branches = self.repo.prefixed_branches(self.prefix)
        if not branches:
            self.ctx.warn(
                f"No {self.category.value} branches exist.\n"
                "\n"
                f"You can start a new {self.category.value} branch:\n"
                "\n"
                f"    git drip {self.category.value} start <name> [<base>]\n"
            )
            return []

        current = self.repo.current_branch()
        width = max(len(b.name) for b in branches) + LIST_PADDING
        verbose = self.ctx.verbose > 0
        for branch in branches:
            marker = "* " if current and branch.prefixed_name == current.prefixed_name else "  "
            line = f"{marker}{branch.name:<{width}}"
            if descriptions or verbose:
                line += self.repo.branch_description(branch) + " "
            if verbose:
                line += self._state_note(branch)
            self.ctx.say(line.rstrip())
        return branches

    def _state_note(self, branch: Branch) -> str:
        base = self.repo.merge_base(branch.full_name, self.master)
        develop = self.repo.rev_parse(self.master)
        tip = self.repo.rev_parse(branch.full_name)
        if tip == develop:
            return "(no commits yet)"

        if self.category is BranchCategory.HOTFIX:
            out, error = self.ctx.runner.capture_output(
                "git", "name-rev", "--tags", "--no-undefined", "--name-only", base
            )
            if error is None and out.strip():
                return f"(based on {out.strip()})"
            return f"(based on {self.repo.rev_parse_short(base)})"

        if base == tip:
            return "(is behind develop, may ff)"
        if base == develop:
            return "(based on latest develop)"
        return "(may be rebased)"

    # ------------------------------------------------------------------
    # Branch lifecycle
    # ------------------------------------------------------------------

    def start(
        self,
        name: str,
        base: str | None = None,
        message: str | None = None,
        fetch: bool = False,
        describe: bool = False,
    ) -> Branch:
        """Create a new category branch and check it out.

        Args:
            name: Branch name without prefix
            base: Start point, master by default
            message: Description stored on the new branch
            fetch: Fetch master from the remote first
            describe: Open the editor for a description

        Returns:
            The new branch

        Raises:
            BranchExistsError: If the branch already exists
            DivergedBranchError: If master differs from its remote counterpart
            GitError: If the branch cannot be created
        """
        branch = Branch(name, self.prefix)
        self.repo.require_branch_absent(branch)
        master = self.master
        base = base or master
        run = self.ctx.runner.run

        if fetch:
            run("git", "fetch", "-q", self.remote, master)

        remote_master = f"{self.remote}/{master}"
        if self.repo.remote_contains(remote_master):
            require_equal(self.ctx, master, remote_master)

        error = self.ctx.runner.run_quiet("git", "checkout", "-b", branch.prefixed_name, base)
        if error is not None:
            raise GitError(
                f"Could not create {self.category.value} branch '{branch.prefixed_name}'",
                command=error.command,
                exit_code=error.exit_code,
                output=error.output,
            )

        if message:
            self.ctx.config.set(f"branch.{branch.prefixed_name}.description", message)
        if describe:
            run("git", "branch", "--edit-description", branch.prefixed_name, interactive=True)

        logger.info(f"Started {branch.prefixed_name} from {base}")
        self.ctx.say(
            "\nSummary of actions:\n"
            f"- A new branch '{branch.prefixed_name}' was created, based on '{base}'\n"
            f"- You are now on branch '{branch.prefixed_name}'\n"
            "\n"
            f"Now, start committing on your {self.category.value}. When done, use:\n"
            "\n"
            f"     git drip {self.category.value} finish {branch.name}\n"
        )
        return branch

    def describe(self, name: str | None = None, message: str | None = None) -> Branch:
        """Set a branch description from a message or the editor."""
        branch = self.resolve_or_current(name)
        if message:
            self.ctx.config.set(f"branch.{branch.prefixed_name}.description", message)
        else:
            self.ctx.runner.run(
                "git", "branch", "--edit-description", branch.prefixed_name, interactive=True
            )
        self.ctx.say(
            "\nSummary of actions:\n"
            f"- The local branch '{branch.prefixed_name}' had description edited\n"
        )
        return branch

    def delete(self, name: str, remote: bool = False) -> Branch:
        """Delete a merged branch, optionally on the remote too.

        Raises:
            BranchNotFoundError: If the branch does not exist
            DirtyTreeError: If the working tree has changes
        """
        branch = self.resolve(name)
        self.repo.require_branch(branch)
        self.repo.require_clean_tree()

        run = self.ctx.runner.run
        run("git", "checkout", self.master)
        if remote:
            run("git", "push", self.remote, f":refs/heads/{branch.prefixed_name}")
        run("git", "branch", "-d", branch.prefixed_name)

        logger.info(f"Deleted {branch.prefixed_name}")
        summary = ["", "Summary of actions:"]
        if remote:
            summary.append(
                f"- {self.category.value.capitalize()} branch '{branch.prefixed_name}' "
                f"has been removed from '{self.remote}'"
            )
        summary.append(
            f"- {self.category.value.capitalize()} branch '{branch.prefixed_name}' has been removed"
        )
        summary.append(f"- You are now on branch '{self.master}'")
        self.ctx.say("\n".join(summary) + "\n")
        return branch

    def checkout(self, name: str) -> Branch:
        """Check out a category branch by name or unique prefix."""
        branch = self.resolve(name)
        self.ctx.runner.run("git", "checkout", branch.prefixed_name)
        return branch

    def diff(self, name: str | None = None) -> None:
        """Show the changes of a branch since it left master.

        Without a name the current branch is compared with its merge base,
        working tree changes included.
        """
        if name:
            branch = self.resolve(name)
            base = self.repo.merge_base(self.master, branch.prefixed_name)
            self.ctx.runner.run("git", "diff", f"{base}..{branch.prefixed_name}", interactive=True)
            return

        current = self.repo.current_branch()
        if current is None or current.detached_head or not self.prefix or current.prefix != self.prefix:
            raise PreconditionError(
                f"Not on a {self.category.value} branch. Name one explicitly."
            )
        base = self.repo.merge_base(self.master, HEAD)
        self.ctx.runner.run("git", "diff", base, interactive=True)

    def rebase_onto(self, branch: Branch, onto: str, interactive: bool = False) -> GitError | None:
        """Check out a branch and rebase it, returning the failure if any."""
        self.ctx.runner.run("git", "checkout", "-q", branch.prefixed_name)
        args = ["rebase"]
        if interactive:
            args.append("-i")
        args.append(onto)
        return self.ctx.runner.run_quiet("git", *args, interactive=interactive)

    def rebase(
        self, name: str | None = None, interactive: bool = False, base: str | None = None
    ) -> Branch:
        """Rebase a branch onto master (or another base).

        Raises:
            DirtyTreeError: If the working tree has changes
            GitError: If the rebase stops
        """
        branch = self.resolve_or_current(name)
        onto = base or self.master
        self.ctx.warn(f"Will try to rebase '{branch.name}' onto '{onto}'")
        self.repo.require_clean_tree()
        self.repo.require_branch(branch)

        error = self.rebase_onto(branch, onto, interactive)
        if error is not None:
            raise error
        logger.info(f"Rebased {branch.prefixed_name} onto {onto}")
        return branch
