"""ProcessRunner -- low-level external command execution.

Two kinds of calls go through here:

- mutating calls (``run``, ``run_quiet``) honour the dry-run flag, are echoed
  at verbosity 1 and are recorded in the context's run log;
- read-only queries (``capture_output``, ``output``) always execute, are
  echoed only at verbosity 2 and must never be used to change state.
"""

from __future__ import annotations

import subprocess
from typing import TYPE_CHECKING

from gitdrip.constants import DEFAULT_QUERY_TIMEOUT
from gitdrip.exceptions import GitError
from gitdrip.logging import get_logger

if TYPE_CHECKING:
    from gitdrip.context import DripContext

logger = get_logger("git.runner")


def command_string(command: str, args: tuple[str, ...] | list[str]) -> str:
    """Render a command line the way it is echoed and logged."""
    return " ".join([command, *args])


class ProcessRunner:
    """Runs external commands on behalf of a DripContext."""

    def __init__(self, ctx: DripContext) -> None:
        self.ctx = ctx

    def run(self, command: str, *args: str, interactive: bool = False) -> None:
        """Run a state-changing command, raising on failure.

        When not in verbose mode the command line is printed before the
        error propagates so the failure has context.

        Args:
            command: Executable name
            *args: Command arguments
            interactive: Inherit the terminal (editors, interactive rebase)

        Raises:
            GitError: If the command exits non-zero or cannot be started
        """
        error = self.run_quiet(command, *args, interactive=interactive)
        if error is not None:
            if self.ctx.verbose == 0:
                self.ctx.warn(f"(running: {command_string(command, args)})")
            raise error

    def run_quiet(self, command: str, *args: str, interactive: bool = False) -> GitError | None:
        """Run a state-changing command, returning the error instead of raising.

        Args:
            command: Executable name
            *args: Command arguments
            interactive: Inherit the terminal (editors, interactive rebase)

        Returns:
            None on success (always in dry-run), otherwise the GitError
        """
        cmdline = command_string(command, args)
        if self.ctx.verbose > 0 or self.ctx.dry_run:
            self.ctx.warn(cmdline)
        if self.ctx.dry_run:
            return None
        if self.ctx.run_log is not None:
            self.ctx.run_log.append(cmdline.strip())

        logger.debug(f"Running: {cmdline}")
        try:
            if interactive:
                result = subprocess.run([command, *args], cwd=self.ctx.cwd, check=False)
                output = ""
            else:
                result = subprocess.run(
                    [command, *args],
                    cwd=self.ctx.cwd,
                    capture_output=True,
                    text=True,
                    check=False,
                )
                if result.stdout:
                    self.ctx.out.print(result.stdout, markup=False, end="")
                if result.stderr:
                    self.ctx.err.print(result.stderr, markup=False, end="")
                output = (result.stdout or "") + (result.stderr or "")
        except OSError as e:
            return GitError(f"Cannot run {command}: {e}", command=cmdline, exit_code=-1)

        if result.returncode != 0:
            logger.info(f"Command failed ({result.returncode}): {cmdline}")
            return GitError(
                f"exit status {result.returncode}",
                command=cmdline,
                exit_code=result.returncode,
                output=output,
            )
        return None

    def capture_output(
        self,
        command: str,
        *args: str,
        timeout: int = DEFAULT_QUERY_TIMEOUT,
    ) -> tuple[str, GitError | None]:
        """Run a read-only query and return its combined output.

        Args:
            command: Executable name
            *args: Command arguments
            timeout: Timeout in seconds

        Returns:
            Tuple of (stdout and stderr combined, error or None)
        """
        cmdline = command_string(command, args)
        # Queries are only shown at -v -v
        if self.ctx.verbose > 1:
            self.ctx.warn(cmdline)
        logger.debug(f"Query: {cmdline}")

        try:
            result = subprocess.run(
                [command, *args],
                cwd=self.ctx.cwd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                check=False,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired:
            return "", GitError(
                f"Command timed out after {timeout}s: {cmdline}",
                command=cmdline,
                exit_code=-1,
            )
        except OSError as e:
            return "", GitError(f"Cannot run {command}: {e}", command=cmdline, exit_code=-1)

        output = result.stdout or ""
        if result.returncode != 0:
            return output, GitError(
                f"exit status {result.returncode}",
                command=cmdline,
                exit_code=result.returncode,
                output=output,
            )
        return output, None

    def output(self, command: str, *args: str) -> str:
        """Run a read-only query that must succeed.

        Args:
            command: Executable name
            *args: Command arguments

        Returns:
            Combined output

        Raises:
            GitError: If the query fails; its output is echoed first
        """
        out, error = self.capture_output(command, *args)
        if error is not None:
            self.ctx.warn(f"{command_string(command, args)}\n{out.rstrip()}")
            raise error
        return out
