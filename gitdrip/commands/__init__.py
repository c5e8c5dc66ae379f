"""git-drip CLI commands."""

from gitdrip.commands.category import feature, hotfix, release
from gitdrip.commands.init import init
from gitdrip.commands.version import version

__all__ = [
    "feature",
    "hotfix",
    "init",
    "release",
    "version",
]
