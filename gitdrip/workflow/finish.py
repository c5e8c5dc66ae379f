"""Finish workflow: merge a category branch into master, resumable after conflicts."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from gitdrip.constants import (
    HEAD,
    MERGE_BASE_FILE,
    SQUASH_BASE_FILE,
    BranchCategory,
    WorkingTreeStatus,
)
from gitdrip.exceptions import MergeConflictError, RebaseConflictError, UnresolvedMergeError
from gitdrip.git.compare import require_equal
from gitdrip.git.repo import Repository
from gitdrip.git.types import Branch
from gitdrip.logging import get_logger
from gitdrip.workflow.branches import BranchWorkflow

if TYPE_CHECKING:
    from gitdrip.context import DripContext

logger = get_logger("workflow.finish")


@dataclass
class FinishResult:
    """Result of a completed finish."""

    branch: str
    target_branch: str
    kept: bool
    remote_deleted: bool = False
    squashed: bool = False
    resumed: bool = False
    tag: str | None = None


class FinishWorkflow:
    """Merge a finished branch back into master.

    A merge that stops on conflicts leaves a marker file holding the master
    branch name in git-drip's state directory. A squash merge also records
    the master tip it started from, since the resolved squash commit has no
    merge parent to detect. Running the finish again after the conflicts are
    committed detects the marker and goes straight to cleanup.
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
        self.branches = BranchWorkflow(ctx, category, self.repo)

    # ------------------------------------------------------------------
    # Resume marker
    # ------------------------------------------------------------------

    def marker_path(self) -> Path:
        """Location of the resume marker."""
        return self.repo.state_path(MERGE_BASE_FILE)

    def squash_marker_path(self) -> Path:
        """Location of the squash start point recorded next to the marker."""
        return self.repo.state_path(SQUASH_BASE_FILE)

    def write_marker(self, master: str, squash_base: str | None = None) -> Path:
        """Record the merge target for a later resume.

        Args:
            master: Branch the merge goes into
            squash_base: Tip of master before a squash merge, if squashing
        """
        path = self.marker_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(master)
        if squash_base is not None:
            self.squash_marker_path().write_text(squash_base)
        else:
            self.squash_marker_path().unlink(missing_ok=True)
        logger.info(f"Wrote resume marker {path}")
        return path

    def read_marker(self) -> str | None:
        """The recorded merge target, or None without a marker."""
        path = self.marker_path()
        if not path.exists():
            return None
        return path.read_text().strip()

    def read_squash_marker(self) -> str | None:
        """The master tip recorded before a stopped squash merge."""
        path = self.squash_marker_path()
        if not path.exists():
            return None
        return path.read_text().strip()

    def clear_marker(self) -> None:
        """Remove the resume marker and any squash record."""
        self.marker_path().unlink(missing_ok=True)
        self.squash_marker_path().unlink(missing_ok=True)

    # ------------------------------------------------------------------
    # Finish
    # ------------------------------------------------------------------

    def finish(
        self,
        name: str | None = None,
        fetch: bool = False,
        rebase: bool = False,
        remote: bool = False,
        keep: bool = False,
        squash: bool = False,
        tag: bool | None = None,
    ) -> FinishResult:
        """Merge the branch into master and clean up.

        Args:
            name: Branch name or unique prefix; current branch when omitted
            fetch: Fetch master and the branch from the remote first
            rebase: Rebase the branch onto master before merging
            remote: Also delete the branch on the remote
            keep: Keep the local branch
            squash: Squash the branch into a single commit
            tag: Tag the result; defaults to the category's convention

        Returns:
            FinishResult describing what was done

        Raises:
            UnresolvedMergeError: If a previous merge still has conflicts
            DivergedBranchError: If a branch differs from its remote counterpart
            RebaseConflictError: If the rebase stops
            MergeConflictError: If the merge stops on conflicts
        """
        branch = self.branches.resolve_or_current(name)
        self.repo.require_branch(branch)
        master = self.branches.master
        if tag is None:
            tag = self.category.tags_on_finish

        finish_base = self.read_marker()
        if finish_base is not None:
            result = self._resume(branch, finish_base, master, remote, keep, tag)
            if result is not None:
                return result

        self.repo.require_clean_tree()
        self._require_up_to_date(branch, master, fetch)

        if rebase:
            self.ctx.warn(f"Will try to rebase '{branch.name}' onto '{master}'")
            error = self.branches.rebase_onto(branch, master)
            if error is not None:
                raise RebaseConflictError(
                    f"Rebase of '{branch.prefixed_name}' onto '{master}' stopped",
                    branch=branch.name,
                    onto=master,
                    category=self.category.value,
                )

        self._merge(branch, master, squash)
        return self._complete(branch, master, remote, keep, squash, tag, resumed=False)

    def _resume(
        self,
        branch: Branch,
        finish_base: str,
        master: str,
        remote: bool,
        keep: bool,
        tag: bool,
    ) -> FinishResult | None:
        if self.repo.working_tree_status() is not WorkingTreeStatus.CLEAN:
            raise UnresolvedMergeError(
                "Merge conflicts not resolved yet",
                source_branch=branch.prefixed_name,
                target_branch=finish_base,
                branch_name=branch.name,
                category=self.category.value,
            )

        squash_base = self.read_squash_marker()
        self.clear_marker()
        if squash_base is not None:
            # Committing the resolved squash moves master past its old tip
            merged = self.repo.rev_parse(finish_base) != squash_base
        else:
            merged = self.repo.is_merged_into(branch, finish_base)
        if not merged:
            logger.info(f"{branch.prefixed_name} not merged into {finish_base}, finishing again")
            return None
        logger.info(f"Resuming finish of {branch.prefixed_name}")
        squashed = squash_base is not None
        return self._complete(branch, master, remote, keep, squashed, tag, resumed=True)

    def _require_up_to_date(self, branch: Branch, master: str, fetch: bool) -> None:
        origin = self.branches.remote
        run = self.ctx.runner.run
        if fetch:
            run("git", "fetch", "-q", origin, master)

        remote_branch = f"{origin}/{branch.prefixed_name}"
        if self.repo.remote_contains(remote_branch):
            if fetch:
                run("git", "fetch", "-q", origin, branch.prefixed_name)
            require_equal(self.ctx, branch.prefixed_name, remote_branch)

        remote_master = f"{origin}/{master}"
        if self.repo.remote_contains(remote_master):
            require_equal(self.ctx, master, remote_master)

    def _merge(self, branch: Branch, master: str, squash: bool) -> None:
        runner = self.ctx.runner
        runner.run("git", "checkout", master)
        squash_base = self.repo.rev_parse(HEAD) if squash else None

        args = ["merge", "--squash", branch.prefixed_name] if squash else ["merge", branch.prefixed_name]
        error = runner.run_quiet("git", *args)
        if error is not None:
            if not self.repo.conflicting_files():
                raise error
            self.write_marker(master, squash_base)
            raise MergeConflictError(
                f"Merge of '{branch.prefixed_name}' into '{master}' stopped on conflicts",
                source_branch=branch.prefixed_name,
                target_branch=master,
                branch_name=branch.name,
                category=self.category.value,
            )

        # A squash merge only prepares the index and SQUASH_MSG
        if squash and self.repo.working_tree_status() is WorkingTreeStatus.UNCOMMITTED:
            runner.run("git", "commit", "--no-edit", "--quiet")

    def _complete(
        self,
        branch: Branch,
        master: str,
        remote: bool,
        keep: bool,
        squashed: bool,
        tag: bool,
        resumed: bool,
    ) -> FinishResult:
        tag_name = None
        if tag:
            tag_name = f"{self.ctx.workflow().version_tag_prefix}{branch.name}"
            self.ctx.runner.run("git", "tag", tag_name)

        self.cleanup(branch, master, remote, keep, squashed, tag_name)
        return FinishResult(
            branch=branch.prefixed_name,
            target_branch=master,
            kept=keep,
            remote_deleted=remote,
            squashed=squashed,
            resumed=resumed,
            tag=tag_name,
        )

    def cleanup(
        self,
        branch: Branch,
        master: str,
        remote: bool = False,
        keep: bool = False,
        squashed: bool = False,
        tag_name: str | None = None,
    ) -> None:
        """Delete the finished branch and print the summary.

        Raises:
            BranchNotFoundError: If the branch disappeared
            DirtyTreeError: If the working tree has changes
        """
        self.repo.require_branch(branch)
        self.repo.require_clean_tree()

        run = self.ctx.runner.run
        origin = self.branches.remote
        if remote:
            run("git", "push", origin, f":refs/heads/{branch.prefixed_name}")
        if not keep:
            run("git", "branch", "-D" if squashed else "-d", branch.prefixed_name)

        label = self.category.value.capitalize()
        lines = [
            "",
            "Summary of actions:",
            f"- The {self.category.value} branch '{branch.prefixed_name}' was merged into '{master}'",
        ]
        if tag_name:
            lines.append(f"- {label} was tagged '{tag_name}'")
        if remote:
            lines.append(f"- {label} branch '{branch.prefixed_name}' has been removed from '{origin}'")
        if keep:
            lines.append(f"- {label} branch '{branch.prefixed_name}' is still available")
        else:
            lines.append(f"- {label} branch '{branch.prefixed_name}' has been removed")
        lines.append(f"- You are now on branch '{master}'")
        self.ctx.say("\n".join(lines) + "\n")
        logger.info(f"Finished {branch.prefixed_name} into {master}")
