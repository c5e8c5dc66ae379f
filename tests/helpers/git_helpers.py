"""Helpers for driving scratch git repositories in tests."""

import io
import subprocess
from pathlib import Path

from rich.console import Console

from gitdrip.context import DripContext


def run_git(*args: str, cwd: Path | None = None) -> str:
    """Run git command safely without shell=True and return stdout."""
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout


def commit_file(repo: Path, name: str, content: str, message: str) -> str:
    """Write a file, commit it and return the new commit hash."""
    (repo / name).write_text(content)
    run_git("add", name, cwd=repo)
    run_git("commit", "-q", "-m", message, cwd=repo)
    return run_git("rev-parse", "HEAD", cwd=repo).strip()


def make_context(repo: Path, verbose: int = 0, dry_run: bool = False) -> DripContext:
    """Build a DripContext writing to in-memory consoles."""
    return DripContext(
        cwd=repo,
        verbose=verbose,
        dry_run=dry_run,
        out=Console(file=io.StringIO(), soft_wrap=True, highlight=False, emoji=False),
        err=Console(file=io.StringIO(), soft_wrap=True, highlight=False, emoji=False),
        run_log=[],
        interactive=False,
    )


def stdout_of(ctx: DripContext) -> str:
    """Text printed to a test context's normal output."""
    return ctx.out.file.getvalue()


def stderr_of(ctx: DripContext) -> str:
    """Text printed to a test context's diagnostic output."""
    return ctx.err.file.getvalue()


def clear_output(ctx: DripContext) -> None:
    """Forget everything printed and run so far."""
    for console in (ctx.out, ctx.err):
        console.file.seek(0)
        console.file.truncate(0)
    if ctx.run_log is not None:
        ctx.run_log.clear()
