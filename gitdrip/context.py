"""Per-invocation state shared by every git-drip component."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from rich.console import Console

from gitdrip.config import WorkflowConfig
from gitdrip.git.config import GitConfigStore
from gitdrip.git.runner import ProcessRunner


def _console(stderr: bool = False) -> Console:
    return Console(stderr=stderr, soft_wrap=True, highlight=False, emoji=False)


@dataclass
class DripContext:
    """Explicit context passed to every component.

    Holds what would otherwise be process-wide state: verbosity, the dry-run
    flag, output consoles, the command log used by tests and the cached git
    configuration. Independent contexts never share state.

    Attributes:
        cwd: Directory commands run in
        verbose: 0 silent, 1 echo mutating commands, 2+ echo queries too
        dry_run: Echo mutating commands without running them
        out: Console for normal output
        err: Console for diagnostics and echoed commands
        run_log: When not None, every executed mutating command is appended
        interactive: Whether prompts and editors may be used
        descriptions: Show branch descriptions in listings by default
    """

    cwd: Path = field(default_factory=Path.cwd)
    verbose: int = 0
    dry_run: bool = False
    out: Console = field(default_factory=_console)
    err: Console = field(default_factory=lambda: _console(stderr=True))
    run_log: list[str] | None = None
    interactive: bool = True
    descriptions: bool = False
    _runner: ProcessRunner | None = field(default=None, init=False, repr=False)
    _config: GitConfigStore | None = field(default=None, init=False, repr=False)

    @property
    def runner(self) -> ProcessRunner:
        """Process runner bound to this context."""
        if self._runner is None:
            self._runner = ProcessRunner(self)
        return self._runner

    @property
    def config(self) -> GitConfigStore:
        """Git configuration store, loaded on first access."""
        if self._config is None:
            self._config = GitConfigStore(self.runner)
        return self._config

    def workflow(self) -> WorkflowConfig:
        """Snapshot of the workflow keys from the configuration store."""
        return WorkflowConfig.from_store(self.config)

    def reset_config(self) -> None:
        """Drop the cached configuration so the next access reloads it."""
        self._config = None

    def say(self, text: str = "") -> None:
        """Print plain text to the normal output."""
        self.out.print(text, markup=False)

    def warn(self, text: str) -> None:
        """Print plain text to the diagnostic output."""
        self.err.print(text, markup=False)
