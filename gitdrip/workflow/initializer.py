"""Repository initialization for the git-drip workflow."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.prompt import Prompt

from gitdrip.constants import (
    DEFAULT_MASTER,
    GITFLOW_DEVELOP_KEY,
    GITFLOW_MASTER_KEY,
    GITFLOW_PREFIX_KEYS,
    MASTER_KEY,
    PREFIX_KEYS,
    VERSION_TAG_KEY,
    BranchCategory,
)
from gitdrip.exceptions import AlreadyInitializedError, BranchNotFoundError, NotInitializedError
from gitdrip.git.repo import Repository
from gitdrip.logging import get_logger

if TYPE_CHECKING:
    from gitdrip.context import DripContext

logger = get_logger("workflow.init")

# (key, suggestion, question) asked in this order
PREFIX_QUESTIONS = (
    *((c.prefix_key, c.default_prefix, f"{c.value.capitalize()} branches?") for c in BranchCategory),
    (VERSION_TAG_KEY, "", "Version tag prefix?"),
)


def is_master_configured(ctx: DripContext, repo: Repository) -> bool:
    """Master key is set, non-empty and names an existing local branch."""
    master = ctx.config.get(MASTER_KEY)
    return ctx.config.has(MASTER_KEY) and master != "" and repo.branch_exists(master)


def are_prefixes_configured(ctx: DripContext) -> bool:
    """All four prefix keys are present (empty values allowed)."""
    return all(ctx.config.has(key) for key in PREFIX_KEYS)


def is_initialized(ctx: DripContext, repo: Repository | None = None) -> bool:
    """Whether the repository is configured for the workflow."""
    repo = repo or Repository(ctx)
    return is_master_configured(ctx, repo) and are_prefixes_configured(ctx)


def is_gitflow_initialized(ctx: DripContext) -> bool:
    """Whether git-flow has already claimed this repository."""
    master = ctx.config.get(GITFLOW_MASTER_KEY)
    develop = ctx.config.get(GITFLOW_DEVELOP_KEY)
    if not master or not develop or master == develop:
        return False
    return all(ctx.config.has(key) for key in GITFLOW_PREFIX_KEYS)


def require_initialized(ctx: DripContext, repo: Repository | None = None) -> None:
    """Raise unless the repository is configured for the workflow.

    Raises:
        NotInitializedError: If it is not
    """
    if not is_initialized(ctx, repo):
        raise NotInitializedError()


class Initializer:
    """Sets up master branch and prefixes in git configuration."""

    def __init__(self, ctx: DripContext, repo: Repository | None = None) -> None:
        self.ctx = ctx
        self.repo = repo or Repository(ctx)

    def run(self, force: bool = False, defaults: bool = False) -> str:
        """Initialize the repository.

        Args:
            force: Reconfigure even when already initialized
            defaults: Accept every suggestion without prompting

        Returns:
            The configured master branch

        Raises:
            AlreadyInitializedError: If git-flow or git-drip is already set up
            DirtyTreeError: If the working tree has changes
        """
        self.require_clean_repo()

        if is_gitflow_initialized(self.ctx):
            raise AlreadyInitializedError("Already initialized for gitflow")

        if is_initialized(self.ctx, self.repo) and not force:
            raise AlreadyInitializedError(
                "Already initialized for git-drip.\n"
                "To force reinitialization, use: git drip init -f"
            )

        if defaults:
            self.ctx.say("Using default branch names.")

        master = self.configure_master(force, defaults)
        self.enforce_head(master)
        self.configure_prefixes(force, defaults)

        logger.info(f"Initialized with master branch {master}")
        self.ctx.say("\ngit drip has been initialized")
        return master

    def require_clean_repo(self) -> None:
        """Create the repository if needed and require a clean tree."""
        if not self.repo.git_dir():
            self.ctx.runner.run("git", "init")
            self.ctx.reset_config()

        if not self.repo.is_headless():
            self.repo.require_clean_tree()

    def _ask(self, question: str, suggestion: str, defaults: bool) -> str:
        if defaults or not self.ctx.interactive:
            self.ctx.say(f"{question} [{suggestion}]")
            return suggestion
        answer = Prompt.ask(question, default=suggestion, console=self.ctx.out)
        return answer.strip() or suggestion

    def configure_master(self, force: bool, defaults: bool) -> str:
        """Choose and store the master branch.

        Raises:
            BranchNotFoundError: If an existing repository lacks the chosen branch
        """
        if is_master_configured(self.ctx, self.repo) and not force:
            return self.ctx.config.get(MASTER_KEY)

        configured = self.ctx.config.get(MASTER_KEY)
        branches = self.repo.local_branches()
        if not branches:
            self.ctx.say("No branches exist yet. Base branches must be created now.")
            suggestion = configured or DEFAULT_MASTER
            should_check = False
        else:
            self.ctx.say("\nWhich branch should be used for development?")
            for branch in branches:
                self.ctx.say(f"   - {branch.prefixed_name}")
            names = {b.prefixed_name for b in branches}
            suggestion = configured if configured in names else DEFAULT_MASTER
            should_check = True

        master = self._ask("Branch name for development:", suggestion, defaults)

        # In an existing repository the branch has to be there already
        if should_check and not self.repo.branch_exists(master):
            raise BranchNotFoundError(f"Local branch '{master}' does not exist.", master)

        self.ctx.config.set(MASTER_KEY, master)
        return master

    def enforce_head(self, master: str) -> None:
        """Give a fresh repository an initial empty commit on master."""
        if self.repo.is_headless():
            run = self.ctx.runner.run
            run("git", "symbolic-ref", "HEAD", f"refs/heads/{master}")
            run("git", "commit", "--allow-empty", "--quiet", "-m", "Initial commit")
            run("git", "checkout", "-q", master)

    def configure_prefixes(self, force: bool, defaults: bool) -> None:
        """Ask for and store the branch and version tag prefixes."""
        if not force and are_prefixes_configured(self.ctx):
            return

        self.ctx.say("\nHow to name supporting branch prefixes?")
        for key, default, question in PREFIX_QUESTIONS:
            suggestion = self.ctx.config.get(key) or default
            prefix = self._ask(question, suggestion, defaults)
            self.ctx.config.set(key, prefix)
