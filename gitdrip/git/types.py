"""Shared data types for git-drip git operations."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from gitdrip.constants import CHANGE_ID_PREFIX, HEAD, PENDING_LOG_FIELDS


@dataclass(frozen=True)
class Branch:
    """A git branch, optionally inside a workflow prefix namespace."""

    name: str
    prefix: str = ""

    @property
    def detached_head(self) -> bool:
        """Whether this is the detached checkout sentinel."""
        return self.name == HEAD

    @property
    def prefixed_name(self) -> str:
        """Short branch name including the workflow prefix."""
        if self.detached_head or not self.prefix:
            return self.name
        return self.prefix + self.name

    @property
    def full_name(self) -> str:
        """Fully qualified ref; the detached sentinel stays unqualified."""
        if self.detached_head:
            return self.name
        return f"refs/heads/{self.prefixed_name}"

    @classmethod
    def parse(cls, name: str, prefixes: Iterable[str]) -> Branch:
        """Build a Branch from a possibly qualified branch name.

        Args:
            name: Branch name, ``refs/heads/`` or ``heads/`` qualifiers allowed
            prefixes: Configured prefixes, matched in order

        Returns:
            Branch with the matching prefix split off
        """
        prefix, short = split_branch_name(name, prefixes)
        return cls(name=short, prefix=prefix)

    def __str__(self) -> str:
        return self.prefixed_name


def split_branch_name(name: str, prefixes: Iterable[str]) -> tuple[str, str]:
    """Split a branch name into (prefix, name).

    Args:
        name: Branch name, possibly qualified
        prefixes: Configured prefixes; the first one that matches wins

    Returns:
        Tuple of (prefix, remaining name); prefix is empty when none match
    """
    for qualifier in ("refs/heads/", "heads/"):
        if name.startswith(qualifier):
            name = name[len(qualifier) :]
            break

    if name == HEAD:
        return "", name

    for prefix in prefixes:
        if prefix and name.startswith(prefix):
            return prefix, name[len(prefix) :]
    return "", name


@dataclass(frozen=True)
class Commit:
    """A single pending commit on a branch."""

    hash: str
    short_hash: str
    parent: str
    message: str
    subject: str
    merge: str = ""
    change_id: str = ""

    @property
    def is_merge(self) -> bool:
        """Whether the commit has a second parent."""
        return bool(self.merge)


@dataclass(frozen=True)
class PendingInfo:
    """Snapshot of a branch's relationship to its upstream."""

    origin_branch: str
    branchpoint: str
    commits_ahead: int = 0
    commits_behind: int = 0
    pending: tuple[Commit, ...] = field(default_factory=tuple)

    @property
    def has_pending_commit(self) -> bool:
        """Whether the branch has commits not on its upstream."""
        return self.commits_ahead > 0


def extract_change_id(message: str) -> str:
    """Return the value of the last ``Change-Id:`` line in a message.

    A message can quote another commit's message, so the last line wins.
    """
    change_id = ""
    for line in message.split("\n"):
        if line.startswith(CHANGE_ID_PREFIX):
            change_id = line[len(CHANGE_ID_PREFIX) :]
    return change_id


def parse_pending_log(text: str) -> list[Commit]:
    """Parse the NUL-delimited pending log into commits.

    The output of ``git log --format=format:%H%x00%h%x00%P%x00%B%x00%s%x00``
    is five NUL-terminated fields per commit, with git's newline record
    separator showing up at the start of the next commit's first field.
    Order is preserved (``--topo-order``: children before parents).

    Args:
        text: Raw log output

    Returns:
        Commits, newest first
    """
    fields = text.strip().split("\x00")
    if len(fields) < PENDING_LOG_FIELDS:
        return []
    fields = [f.lstrip("\r\n") for f in fields]

    commits = []
    for i in range(0, len(fields) - PENDING_LOG_FIELDS + 1, PENDING_LOG_FIELDS):
        commit_hash, short_hash, parents, message, subject = fields[i : i + PENDING_LOG_FIELDS]
        # %P can start with a newline
        parent, _, merge = parents.strip().partition(" ")
        commits.append(
            Commit(
                hash=commit_hash,
                short_hash=short_hash,
                parent=parent,
                merge=merge,
                message=message,
                subject=subject,
                change_id=extract_change_id(message),
            )
        )
    return commits
