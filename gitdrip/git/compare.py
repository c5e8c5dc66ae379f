"""Comparison of a local ref against its remote counterpart."""

from __future__ import annotations

from typing import TYPE_CHECKING

from gitdrip.constants import CompareStatus
from gitdrip.exceptions import DivergedBranchError
from gitdrip.logging import get_logger

if TYPE_CHECKING:
    from gitdrip.context import DripContext

logger = get_logger("git.compare")


def compare_branches(ctx: DripContext, local: str, remote: str) -> CompareStatus:
    """Classify how ``local`` relates to ``remote``.

    Args:
        ctx: Context to run git in
        local: Local ref
        remote: Remote ref

    Returns:
        EQUAL when both resolve to the same commit; BEHIND when local is the
        merge base (fast-forwardable); AHEAD when remote is the merge base;
        NEED_MERGE when both moved; NO_COMMON_ANCESTOR when git finds no
        merge base.

    Raises:
        GitError: If either ref cannot be resolved
    """
    commit1 = ctx.runner.output("git", "rev-parse", local).strip()
    commit2 = ctx.runner.output("git", "rev-parse", remote).strip()
    if commit1 == commit2:
        return CompareStatus.EQUAL

    out, error = ctx.runner.capture_output("git", "merge-base", commit1, commit2)
    if error is not None:
        return CompareStatus.NO_COMMON_ANCESTOR
    base = out.strip()

    if commit1 == base:
        return CompareStatus.BEHIND
    if commit2 == base:
        return CompareStatus.AHEAD
    return CompareStatus.NEED_MERGE


def require_equal(ctx: DripContext, local: str, remote: str) -> CompareStatus:
    """Require ``local`` to match ``remote``.

    Being ahead only warns; any other difference is fatal.

    Args:
        ctx: Context to run git in
        local: Local ref
        remote: Remote ref

    Returns:
        The comparison status (EQUAL or AHEAD)

    Raises:
        DivergedBranchError: If local is behind or the refs have diverged
    """
    status = compare_branches(ctx, local, remote)
    if status is CompareStatus.EQUAL:
        return status

    diverged = f"Branches '{local}' and '{remote}' have diverged."
    if status is CompareStatus.AHEAD:
        ctx.warn(diverged)
        ctx.warn(f"And local branch '{local}' is ahead of '{remote}'.")
        logger.info(f"{local} is ahead of {remote}")
        return status

    if status is CompareStatus.BEHIND:
        message = f"{diverged}\nAnd branch '{local}' may be fast-forwarded."
    else:
        message = f"{diverged}\nBranches need merging first."
    raise DivergedBranchError(message, local, remote, status.value)
