"""Shared utilities for git-drip CLI commands."""

from __future__ import annotations

import functools
from collections.abc import Callable
from typing import Any, TypeVar

import click

from gitdrip.context import DripContext
from gitdrip.exceptions import DripError, MergeConflictError, RebaseConflictError
from gitdrip.logging import get_logger

logger = get_logger("cli")

F = TypeVar("F", bound=Callable[..., Any])


def current_drip() -> DripContext:
    """DripContext of the running click invocation.

    Falls back to a fresh context before the root command has set one up.
    """
    click_ctx = click.get_current_context(silent=True)
    if click_ctx is not None and isinstance(click_ctx.obj, DripContext):
        return click_ctx.obj
    return DripContext()


def fatal(drip: DripContext, message: str) -> None:
    """Print a fatal error line to the diagnostic output."""
    drip.warn(f"git-drip: fatal: {message}")


def handle_errors(func: F) -> F:
    """Turn git-drip errors into messages and exit codes.

    Merge and rebase conflicts print resolution steps on normal output;
    every other error becomes a single fatal line. All of them exit 1,
    an interrupt exits 130.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        drip = current_drip()
        try:
            return func(*args, **kwargs)
        except KeyboardInterrupt:
            drip.warn("\nInterrupted")
            raise SystemExit(130) from None
        except (MergeConflictError, RebaseConflictError) as e:
            logger.info(e.message, extra={"branch": e.details.get("source_branch", "")})
            drip.say(e.instructions)
            raise SystemExit(1) from e
        except DripError as e:
            logger.debug(f"{type(e).__name__}: {e.message}")
            fatal(drip, e.message)
            raise SystemExit(1) from e
        except (SystemExit, click.exceptions.ClickException, click.exceptions.Abort, click.exceptions.Exit):
            raise
        except Exception as e:  # noqa: BLE001 - top-level catch-all, logged
            logger.exception("Command failed")
            fatal(drip, str(e))
            raise SystemExit(1) from e

    return wrapper  # type: ignore[return-value]
