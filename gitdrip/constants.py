"""git-drip constants and enumerations."""

from enum import Enum

# Detached checkout sentinel
HEAD = "HEAD"

# git configuration keys
MASTER_KEY = "gitdrip.branch.master"
FEATURE_PREFIX_KEY = "gitdrip.prefix.feature"
RELEASE_PREFIX_KEY = "gitdrip.prefix.release"
HOTFIX_PREFIX_KEY = "gitdrip.prefix.hotfix"
VERSION_TAG_KEY = "gitdrip.prefix.versiontag"
ORIGIN_KEY = "gitdrip.origin"

PREFIX_KEYS = (FEATURE_PREFIX_KEY, RELEASE_PREFIX_KEY, HOTFIX_PREFIX_KEY, VERSION_TAG_KEY)

# git-flow keys, checked so we never initialize on top of it
GITFLOW_MASTER_KEY = "gitflow.branch.master"
GITFLOW_DEVELOP_KEY = "gitflow.branch.develop"
GITFLOW_PREFIX_KEYS = (
    "gitflow.prefix.feature",
    "gitflow.prefix.release",
    "gitflow.prefix.hotfix",
    "gitflow.prefix.support",
    "gitflow.prefix.versiontag",
)

DEFAULT_MASTER = "master"
DEFAULT_ORIGIN = "origin"

# Private state under the repository's git dir
STATE_DIR = ".gitdrip"
MERGE_BASE_FILE = "MERGE_BASE"
# master tip before a squash merge that stopped on conflicts
SQUASH_BASE_FILE = "SQUASH_BASE"

# YAML preferences file name
SETTINGS_FILE = ".gitdrip.yaml"

# Default timeout for read-only queries
DEFAULT_QUERY_TIMEOUT = 60

# git log format: five NUL-terminated fields per commit
PENDING_LOG_FORMAT = "--format=format:%H%x00%h%x00%P%x00%B%x00%s%x00"
PENDING_LOG_FIELDS = 5
CHANGE_ID_PREFIX = "Change-Id: "


class CompareStatus(Enum):
    """Relationship of a local ref to its remote counterpart."""

    EQUAL = "equal"
    BEHIND = "behind"
    AHEAD = "ahead"
    NEED_MERGE = "need_merge"
    NO_COMMON_ANCESTOR = "no_common_ancestor"


class WorkingTreeStatus(Enum):
    """State of the working tree relative to HEAD."""

    CLEAN = "clean"
    UNSTAGED = "unstaged"
    UNCOMMITTED = "uncommitted"


class BranchCategory(Enum):
    """Workflow branch categories and their prefix configuration keys."""

    FEATURE = "feature"
    RELEASE = "release"
    HOTFIX = "hotfix"

    @property
    def prefix_key(self) -> str:
        """Configuration key holding this category's prefix."""
        return {
            BranchCategory.FEATURE: FEATURE_PREFIX_KEY,
            BranchCategory.RELEASE: RELEASE_PREFIX_KEY,
            BranchCategory.HOTFIX: HOTFIX_PREFIX_KEY,
        }[self]

    @property
    def default_prefix(self) -> str:
        """Prefix suggested during initialization."""
        return f"{self.value}/"

    @property
    def tags_on_finish(self) -> bool:
        """Whether finishing a branch of this category tags the merge."""
        return self is not BranchCategory.FEATURE
