"""git-drip - a feature/release/hotfix branching workflow on top of git.

Wraps the git command line and keeps its own state in git configuration.
"""

__version__ = "0.4.0"
__author__ = "git-drip Team"

from gitdrip.constants import BranchCategory, CompareStatus, WorkingTreeStatus
from gitdrip.exceptions import DripError

__all__ = [
    "__version__",
    "BranchCategory",
    "CompareStatus",
    "WorkingTreeStatus",
    "DripError",
]
