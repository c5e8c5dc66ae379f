"""git-drip exception hierarchy."""

from typing import Any


class DripError(Exception):
    """Base exception for all git-drip errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class ConfigurationError(DripError):
    """Error in git-drip configuration or preferences file."""

    pass


class NotInitializedError(DripError):
    """Repository has not been set up for the workflow."""

    def __init__(self) -> None:
        super().__init__('Not a git-drip enabled repo yet. Please run "git drip init" first.')


class AlreadyInitializedError(DripError):
    """Initialization requested on an already configured repository."""

    pass


class PreconditionError(DripError):
    """A workflow precondition does not hold."""

    pass


class DirtyTreeError(PreconditionError):
    """Working tree has unstaged or uncommitted changes."""

    def __init__(self, message: str, status: str) -> None:
        super().__init__(message, {"status": status})
        self.status = status


class BranchNotFoundError(PreconditionError):
    """A required branch does not exist."""

    def __init__(self, message: str, branch: str) -> None:
        super().__init__(message, {"branch": branch})
        self.branch = branch


class BranchExistsError(PreconditionError):
    """A branch that must be absent already exists."""

    def __init__(self, message: str, branch: str) -> None:
        super().__init__(message, {"branch": branch})
        self.branch = branch


class AmbiguousBranchError(PreconditionError):
    """A name prefix matches more than one branch."""

    def __init__(self, prefix: str, candidates: list[str]) -> None:
        listing = "\n".join(f"- {c}" for c in candidates)
        super().__init__(
            f"Multiple branches match prefix '{prefix}':\n{listing}",
            {"prefix": prefix, "candidates": candidates},
        )
        self.prefix = prefix
        self.candidates = candidates


class DivergedBranchError(PreconditionError):
    """Local and remote refs are not in a state that allows the workflow."""

    def __init__(self, message: str, local: str, remote: str, status: str) -> None:
        super().__init__(message, {"local": local, "remote": remote, "status": status})
        self.local = local
        self.remote = remote
        self.status = status


class GitError(DripError):
    """Error in git operations."""

    def __init__(
        self,
        message: str,
        command: str | None = None,
        exit_code: int | None = None,
        output: str = "",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.command = command
        self.exit_code = exit_code
        self.output = output


class MergeConflictError(GitError):
    """Merge stopped on conflicts; the finish can be resumed."""

    def __init__(
        self,
        message: str,
        source_branch: str,
        target_branch: str,
        branch_name: str,
        category: str = "feature",
    ) -> None:
        super().__init__(
            message,
            details={
                "source_branch": source_branch,
                "target_branch": target_branch,
            },
        )
        self.source_branch = source_branch
        self.target_branch = target_branch
        self.branch_name = branch_name
        self.category = category

    @property
    def instructions(self) -> str:
        """Human readable steps for resolving and resuming."""
        return (
            "There were merge conflicts. To resolve the merge conflict manually, use:\n"
            "    git mergetool\n"
            "    git commit\n"
            "\n"
            "You can then complete the finish by running it again:\n"
            f"    git drip {self.category} finish {self.branch_name}\n"
        )


class UnresolvedMergeError(MergeConflictError):
    """Finish was re-run before the previous conflicts were resolved."""

    @property
    def instructions(self) -> str:
        return (
            "Merge conflicts not resolved yet, use:\n"
            "    git mergetool\n"
            "    git commit\n"
            "\n"
            "You can then complete the finish by running it again:\n"
            f"    git drip {self.category} finish {self.branch_name}\n"
        )


class RebaseConflictError(GitError):
    """Rebase before finish stopped; the user must complete it by hand."""

    def __init__(self, message: str, branch: str, onto: str, category: str = "feature") -> None:
        super().__init__(message, details={"branch": branch, "onto": onto})
        self.branch = branch
        self.onto = onto
        self.category = category

    @property
    def instructions(self) -> str:
        """Human readable steps for completing the rebase."""
        return (
            "Finish was aborted due to conflicts during rebase.\n"
            "Please finish the rebase manually now.\n"
            "When finished, re-run\n"
            f"    git drip {self.category} finish {self.branch}\n"
        )
