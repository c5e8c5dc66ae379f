"""GitConfigStore -- cached view of ``git config --list`` with write-through."""

from __future__ import annotations

from typing import TYPE_CHECKING

from gitdrip.logging import get_logger

if TYPE_CHECKING:
    from gitdrip.git.runner import ProcessRunner

logger = get_logger("git.config")


def parse_config_list(text: str) -> dict[str, str]:
    """Parse ``git config --list`` output into a mapping.

    Each line is split on the first ``=``; a key without ``=`` maps to an
    empty string. Later duplicates override earlier ones, matching git's
    own precedence (system, global, local).

    Args:
        text: Raw command output

    Returns:
        Mapping of key to value
    """
    cfg: dict[str, str] = {}
    for line in text.splitlines():
        if not line.strip():
            continue
        key, _, value = line.partition("=")
        cfg[key] = value
    return cfg


class GitConfigStore:
    """Key/value configuration loaded once per context.

    ``get`` does not distinguish an absent key from an empty value; ``has``
    does. ``set`` writes through to git and only updates the cache when the
    write succeeded.
    """

    def __init__(self, runner: ProcessRunner) -> None:
        self.runner = runner
        self._cfg: dict[str, str] | None = None

    @property
    def values(self) -> dict[str, str]:
        """The cached mapping, loading it on first access."""
        if self._cfg is None:
            out, error = self.runner.capture_output("git", "config", "--list")
            if error is not None:
                # No readable configuration at all (e.g. broken HOME); an
                # empty store reads as "not initialized".
                logger.debug(f"git config --list failed: {error}")
                out = ""
            self._cfg = parse_config_list(out)
        return self._cfg

    def get(self, key: str) -> str:
        """Get the value for a key, or an empty string when absent."""
        return self.values.get(key, "")

    def has(self, key: str) -> bool:
        """Report whether a key is configured, even with an empty value."""
        return key in self.values

    def set(self, key: str, value: str) -> None:
        """Set a key in git configuration and in the cache.

        Args:
            key: Configuration key
            value: New value

        Raises:
            GitError: If ``git config`` fails; the cache is left unchanged
        """
        self.runner.run("git", "config", key, value)
        self.values[key] = value
        logger.info(f"Set {key}={value}")

    def reset(self) -> None:
        """Forget the cached mapping."""
        self._cfg = None
