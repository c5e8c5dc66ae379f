"""Repository -- branch model and working-tree queries built on ProcessRunner."""

from __future__ import annotations

import re
from pathlib import Path
from typing import TYPE_CHECKING

from gitdrip.constants import (
    DEFAULT_MASTER,
    HEAD,
    MERGE_BASE_FILE,
    PENDING_LOG_FORMAT,
    STATE_DIR,
    WorkingTreeStatus,
)
from gitdrip.exceptions import (
    BranchExistsError,
    BranchNotFoundError,
    DirtyTreeError,
    GitError,
)
from gitdrip.git.types import Branch, PendingInfo, parse_pending_log
from gitdrip.logging import get_logger

if TYPE_CHECKING:
    from gitdrip.context import DripContext

logger = get_logger("git.repo")

_STAGED_RE = re.compile(r"^[ACDMR]  ")
_UNSTAGED_RE = re.compile(r"^.[ACDMR]")


def nonblank_lines(text: str) -> list[str]:
    """Return the non-blank lines of command output."""
    return [line for line in text.splitlines() if line.strip()]


def _listing_name(line: str) -> str:
    """Normalize one line of ``git branch`` output to a branch name."""
    name = line.strip().removeprefix("* ")
    if " -> " in name:
        name = name.split(" -> ", 1)[0]
    return name.strip()


class Repository:
    """Read-mostly view of the repository for one DripContext.

    Nothing here is cached between calls: every query reflects the
    repository as it is now. Callers that need a stable picture of a
    branch take a :class:`PendingInfo` snapshot with :meth:`load_pending`.
    """

    def __init__(self, ctx: DripContext) -> None:
        self.ctx = ctx
        self.runner = ctx.runner

    # ------------------------------------------------------------------
    # Repository location and state
    # ------------------------------------------------------------------

    def git_dir(self) -> str:
        """Path of the git metadata directory, empty outside a repository."""
        out, error = self.runner.capture_output("git", "rev-parse", "--git-dir")
        if error is not None:
            return ""
        return out.strip()

    def git_root(self) -> Path:
        """Top-level directory of the working tree (cwd when unknown)."""
        out, error = self.runner.capture_output("git", "rev-parse", "--show-toplevel")
        if error is not None or not out.strip():
            return self.ctx.cwd
        return Path(out.strip())

    def state_path(self, name: str = MERGE_BASE_FILE) -> Path:
        """Path of a file in git-drip's private state directory.

        Raises:
            GitError: If not inside a git repository
        """
        git_dir = self.git_dir()
        if not git_dir:
            raise GitError("Not a git repository", details={"path": str(self.ctx.cwd)})
        return self.ctx.cwd / git_dir / STATE_DIR / name

    def is_headless(self) -> bool:
        """Whether HEAD does not point at a commit yet."""
        _, error = self.runner.capture_output("git", "rev-parse", "--quiet", "--verify", HEAD)
        return error is not None

    def rev_parse(self, ref: str) -> str:
        """Resolve a ref to a commit identifier."""
        return self.runner.output("git", "rev-parse", ref).strip()

    def rev_parse_short(self, ref: str) -> str:
        """Abbreviated commit identifier of a ref."""
        return self.runner.output("git", "rev-parse", "--short", ref).strip()

    def merge_base(self, a: str, b: str) -> str:
        """Best common ancestor of two commits."""
        return self.runner.output("git", "merge-base", a, b).strip()

    def conflicting_files(self) -> list[str]:
        """Paths with unresolved merge conflicts."""
        out, error = self.runner.capture_output("git", "diff", "--name-only", "--diff-filter=U")
        if error is not None:
            return []
        return nonblank_lines(out)

    def working_tree_status(self) -> WorkingTreeStatus:
        """Classify the working tree as clean, unstaged or uncommitted."""
        _, error = self.runner.capture_output(
            "git", "diff", "--no-ext-diff", "--ignore-submodules", "--quiet", "--exit-code"
        )
        if error is not None:
            return WorkingTreeStatus.UNSTAGED
        _, error = self.runner.capture_output(
            "git", "diff-index", "--cached", "--quiet", "--ignore-submodules", HEAD, "--"
        )
        if error is not None:
            return WorkingTreeStatus.UNCOMMITTED
        return WorkingTreeStatus.CLEAN

    def _porcelain(self) -> list[str]:
        return nonblank_lines(self.runner.output("git", "status", "-b", "--porcelain"))

    def has_staged_changes(self) -> bool:
        """Whether the index holds changes."""
        return any(_STAGED_RE.match(line) for line in self._porcelain())

    def has_unstaged_changes(self) -> bool:
        """Whether tracked files have unstaged modifications."""
        return any(_UNSTAGED_RE.match(line) for line in self._porcelain())

    def require_clean_tree(self) -> None:
        """Raise unless the working tree is clean.

        Raises:
            DirtyTreeError: On unstaged or uncommitted changes
        """
        status = self.working_tree_status()
        if status is WorkingTreeStatus.UNSTAGED:
            raise DirtyTreeError("Working tree contains unstaged changes. Aborting.", status.value)
        if status is WorkingTreeStatus.UNCOMMITTED:
            raise DirtyTreeError("Working tree contains uncommitted changes. Aborting.", status.value)

    # ------------------------------------------------------------------
    # Branches
    # ------------------------------------------------------------------

    def _prefixes(self) -> list[str]:
        return self.ctx.workflow().branch_prefixes

    def current_branch(self) -> Branch | None:
        """The checked out branch, or None without a branch context.

        A detached checkout is reported as the ``HEAD`` sentinel.
        """
        out, error = self.runner.capture_output("git", "rev-parse", "--abbrev-ref", HEAD)
        if error is not None or not out.strip():
            return None
        return Branch.parse(out.strip(), self._prefixes())

    def local_branches(self) -> list[Branch]:
        """All local branches.

        In detached mode one entry is the ``HEAD`` sentinel rather than the
        localized description git prints for it.
        """
        out, error = self.runner.capture_output("git", "branch", "-q", "--no-color")
        if error is not None:
            return []

        current = self.current_branch()
        prefixes = self._prefixes()
        branches = []
        for line in nonblank_lines(out):
            stripped = line.strip()
            if stripped.startswith("* ") and current is not None:
                name = current.prefixed_name
            else:
                name = _listing_name(stripped)
            branches.append(Branch.parse(name, prefixes))
        return branches

    def prefixed_branches(self, prefix: str) -> list[Branch]:
        """Local branches whose name starts with a prefix."""
        return [b for b in self.local_branches() if b.prefixed_name.startswith(prefix)]

    def remote_branches(self) -> list[str]:
        """Remote-tracking branch names such as ``origin/master``."""
        out, error = self.runner.capture_output("git", "branch", "-r", "-q", "--no-color")
        if error is not None:
            return []
        return [_listing_name(line) for line in nonblank_lines(out)]

    def origin_branches(self) -> list[str]:
        """Remote-tracking branches of the configured remote."""
        remote = self.ctx.workflow().origin
        return [b for b in self.remote_branches() if b.startswith(f"{remote}/")]

    def branch_exists(self, name: str) -> bool:
        """Whether a local branch with this (prefixed) name exists."""
        return any(b.prefixed_name == name for b in self.local_branches())

    def remote_contains(self, name: str) -> bool:
        """Whether a remote-tracking branch with this name exists."""
        return name in self.remote_branches()

    def require_branch(self, branch: Branch) -> None:
        """Raise unless the branch exists locally.

        Raises:
            BranchNotFoundError: If the branch is missing
        """
        if not self.branch_exists(branch.prefixed_name):
            raise BranchNotFoundError(
                f"Branch '{branch.prefixed_name}' does not exist and is required",
                branch.prefixed_name,
            )

    def require_branch_absent(self, branch: Branch) -> None:
        """Raise if the branch already exists locally.

        Raises:
            BranchExistsError: If the branch exists
        """
        if self.branch_exists(branch.prefixed_name):
            raise BranchExistsError(
                f"Branch '{branch.prefixed_name}' already exists. Pick another name",
                branch.prefixed_name,
            )

    def branch_description(self, branch: Branch) -> str:
        """The branch's free-text description, empty when unset."""
        return self.ctx.config.get(f"branch.{branch.prefixed_name}.description")

    # ------------------------------------------------------------------
    # Upstream relationship
    # ------------------------------------------------------------------

    def origin_branch(self, branch: Branch) -> str:
        """Name of the upstream branch the branch tracks, e.g. ``origin/master``.

        Branches created before upstream tracking was set up fall back to
        the remote's master branch.

        Raises:
            GitError: If git fails for any other reason
        """
        workflow = self.ctx.workflow()
        if branch.detached_head:
            # Not a real upstream ref
            return f"{workflow.origin}/{HEAD}"

        args = ("rev-parse", "--abbrev-ref", f"{branch.prefixed_name}@{{u}}")
        out, error = self.runner.capture_output("git", *args)
        if error is None and out.strip():
            return out.strip()

        # git has said both "No upstream configured" and "no upstream configured"
        if "upstream configured" in out:
            return f"{workflow.origin}/{workflow.master or DEFAULT_MASTER}"

        self.ctx.warn(f"git {' '.join(args)}\n{out.rstrip()}")
        raise error or GitError(f"Cannot resolve upstream of {branch.prefixed_name}")

    def is_local_only(self, branch: Branch) -> bool:
        """Whether the branch is not known to the remote under its own name."""
        remote = self.ctx.workflow().origin
        return f"{remote}/{branch.prefixed_name}" != self.origin_branch(branch)

    def _contained_in(self, commit: str, branch_name: str) -> bool:
        """Whether a commit is reachable from a local or remote-tracking branch."""
        out = self.runner.output("git", "branch", "-a", "--no-color", "--contains", commit)
        for line in nonblank_lines(out):
            name = _listing_name(line)
            if branch_name in (name, name.removeprefix("remotes/")):
                return True
        return False

    def load_pending(self, branch: Branch) -> PendingInfo:
        """Take a snapshot of the branch's pending commits and branch point.

        Args:
            branch: Branch to inspect

        Returns:
            PendingInfo for the branch against its upstream
        """
        # In case of an early return
        branchpoint = self.rev_parse(HEAD)
        origin = self.origin_branch(branch)
        if branch.detached_head:
            return PendingInfo(origin_branch=origin, branchpoint=branchpoint)

        # --topo-order: children before parents
        log = self.runner.output(
            "git", "log", "--topo-order", PENDING_LOG_FORMAT, f"{origin}..{branch.full_name}", "--"
        )
        commits = parse_pending_log(log)

        found_merge_branchpoint = False
        for commit in commits:
            if commit.is_merge:
                # A merge breaks "parent of the oldest pending commit is the
                # branch point". Any merge parent reachable from the upstream
                # becomes the branch point; later upstream parents and later
                # merges overwrite earlier ones. Both parents are checked so
                # parent order does not matter.
                for candidate in (commit.parent, *commit.merge.split()):
                    if self._contained_in(candidate, origin):
                        found_merge_branchpoint = True
                        branchpoint = candidate
            if not found_merge_branchpoint:
                branchpoint = commit.parent

        behind = nonblank_lines(
            self.runner.output("git", "log", "--format=format:x", f"{branch.full_name}..{origin}", "--")
        )
        logger.debug(f"{branch.prefixed_name}: {len(commits)} ahead, {len(behind)} behind {origin}")
        return PendingInfo(
            origin_branch=origin,
            branchpoint=branchpoint,
            commits_ahead=len(commits),
            commits_behind=len(behind),
            pending=tuple(commits),
        )

    def is_merged_into(self, branch: Branch, base: str) -> bool:
        """Whether ``base`` is among the branches containing the branch tip."""
        return self._contained_in(branch.full_name, base)
