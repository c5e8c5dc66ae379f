"""git-drip git package -- structured access to the git command line.

Re-exports core classes for convenient access:
    from gitdrip.git import ProcessRunner, GitConfigStore, Repository, Branch
"""

from gitdrip.git.compare import compare_branches, require_equal
from gitdrip.git.config import GitConfigStore, parse_config_list
from gitdrip.git.repo import Repository
from gitdrip.git.runner import ProcessRunner
from gitdrip.git.types import (
    Branch,
    Commit,
    PendingInfo,
    extract_change_id,
    parse_pending_log,
    split_branch_name,
)

__all__ = [
    "ProcessRunner",
    "GitConfigStore",
    "parse_config_list",
    "Repository",
    "Branch",
    "Commit",
    "PendingInfo",
    "extract_change_id",
    "parse_pending_log",
    "split_branch_name",
    "compare_branches",
    "require_equal",
]
