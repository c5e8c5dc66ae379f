"""git-drip configuration models using Pydantic.

Two layers live here:

- ``DripSettings``: user preferences read from a ``.gitdrip.yaml`` file
  (CLI defaults and logging).
- ``WorkflowConfig``: a validated snapshot of the ``gitdrip.*`` keys kept in
  git configuration, built from a :class:`~gitdrip.git.config.GitConfigStore`.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml  # type: ignore[import-untyped]
from pydantic import BaseModel, Field, ValidationError

from gitdrip.constants import (
    DEFAULT_ORIGIN,
    FEATURE_PREFIX_KEY,
    HOTFIX_PREFIX_KEY,
    MASTER_KEY,
    ORIGIN_KEY,
    RELEASE_PREFIX_KEY,
    SETTINGS_FILE,
    VERSION_TAG_KEY,
    BranchCategory,
)
from gitdrip.exceptions import ConfigurationError

if TYPE_CHECKING:
    from gitdrip.git.config import GitConfigStore


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="warning", pattern="^(debug|info|warn|warning|error)$")
    directory: str | None = None
    json_output: bool = True


class DripSettings(BaseModel):
    """User preferences for the git-drip command line."""

    verbose: int = Field(default=0, ge=0, le=5)
    descriptions: bool = False
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def find(cls, git_root: str | Path | None = None) -> Path | None:
        """Locate the preferences file.

        Search order: current directory, repository root, home directory.

        Args:
            git_root: Repository root, if known

        Returns:
            Path of the first existing file, or None
        """
        candidates = [Path.cwd() / SETTINGS_FILE]
        if git_root:
            candidates.append(Path(git_root) / SETTINGS_FILE)
        candidates.append(Path.home() / SETTINGS_FILE)

        for candidate in candidates:
            if candidate.is_file():
                return candidate
        return None

    @classmethod
    def load(cls, config_path: str | Path | None = None) -> DripSettings:
        """Load preferences from a YAML file.

        Args:
            config_path: Path to the file. Missing path means defaults.

        Returns:
            DripSettings instance

        Raises:
            ConfigurationError: If the file cannot be parsed or validated
        """
        if config_path is None:
            return cls()

        path = Path(config_path)
        if not path.exists():
            raise ConfigurationError(f"Config file not found: {path}", {"path": str(path)})

        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}", {"path": str(path)}) from e

        return cls.from_dict(data, source=path)

    @classmethod
    def from_dict(cls, data: dict[str, Any], source: Path | None = None) -> DripSettings:
        """Create settings from a dictionary.

        Args:
            data: Settings dictionary
            source: File the data came from, for error messages

        Returns:
            DripSettings instance
        """
        try:
            return cls(**data)
        except ValidationError as e:
            where = f" in {source}" if source else ""
            raise ConfigurationError(f"Invalid settings{where}: {e.errors()[0]['msg']}") from e

    def to_dict(self) -> dict[str, Any]:
        """Convert settings to a dictionary."""
        return self.model_dump()


class WorkflowConfig(BaseModel):
    """The workflow keys stored in git configuration."""

    master: str = ""
    feature_prefix: str = ""
    release_prefix: str = ""
    hotfix_prefix: str = ""
    version_tag_prefix: str = ""
    origin: str = DEFAULT_ORIGIN

    @classmethod
    def from_store(cls, store: GitConfigStore) -> WorkflowConfig:
        """Build a snapshot from the git configuration store.

        Args:
            store: Loaded configuration store

        Returns:
            WorkflowConfig instance
        """
        return cls(
            master=store.get(MASTER_KEY),
            feature_prefix=store.get(FEATURE_PREFIX_KEY),
            release_prefix=store.get(RELEASE_PREFIX_KEY),
            hotfix_prefix=store.get(HOTFIX_PREFIX_KEY),
            version_tag_prefix=store.get(VERSION_TAG_KEY),
            origin=store.get(ORIGIN_KEY) or DEFAULT_ORIGIN,
        )

    @property
    def branch_prefixes(self) -> list[str]:
        """Non-empty branch prefixes in feature, release, hotfix order."""
        return [p for p in (self.feature_prefix, self.release_prefix, self.hotfix_prefix) if p]

    def prefix_for(self, category: BranchCategory) -> str:
        """Get the configured prefix of a branch category.

        Args:
            category: Branch category

        Returns:
            Prefix string (may be empty)
        """
        return {
            BranchCategory.FEATURE: self.feature_prefix,
            BranchCategory.RELEASE: self.release_prefix,
            BranchCategory.HOTFIX: self.hotfix_prefix,
        }[category]
