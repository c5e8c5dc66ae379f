"""git-drip workflows -- init, branch lifecycle and finish."""

from gitdrip.workflow.branches import BranchWorkflow
from gitdrip.workflow.finish import FinishResult, FinishWorkflow
from gitdrip.workflow.initializer import Initializer, is_initialized, require_initialized

__all__ = [
    "BranchWorkflow",
    "FinishResult",
    "FinishWorkflow",
    "Initializer",
    "is_initialized",
    "require_initialized",
]
