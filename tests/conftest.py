"""Pytest configuration and fixtures for git-drip tests."""

import os
from collections.abc import Generator
from pathlib import Path

import pytest

from gitdrip.context import DripContext
from gitdrip.workflow.initializer import Initializer
from tests.helpers.git_helpers import clear_output, commit_file, make_context, run_git


@pytest.fixture(autouse=True)
def git_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate git from the user's configuration.

    HOME points at a scratch directory holding a minimal global config, so
    neither a real ~/.gitconfig nor a ~/.gitdrip.yaml leaks into tests.
    """
    home = tmp_path / "home"
    home.mkdir()
    (home / ".gitconfig").write_text(
        "[user]\n"
        "\tname = Test\n"
        "\temail = test@test.com\n"
        "[init]\n"
        "\tdefaultBranch = master\n"
        "[advice]\n"
        "\tdetachedHead = false\n"
    )
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_EDITOR", "true")
    monkeypatch.setenv("GIT_MERGE_AUTOEDIT", "no")
    monkeypatch.delenv("GIT_DIR", raising=False)
    monkeypatch.delenv("GIT_WORK_TREE", raising=False)
    return home


@pytest.fixture
def tmp_repo(tmp_path: Path) -> Generator[Path, None, None]:
    """Create a temporary git repository with one commit on master.

    Yields:
        Path to the temporary repository
    """
    repo = tmp_path / "repo"
    repo.mkdir()
    orig_dir = os.getcwd()
    os.chdir(repo)

    run_git("init", "-q", "-b", "master", cwd=repo)
    commit_file(repo, "README.md", "# Test Repo\n", "Initial commit")

    yield repo

    os.chdir(orig_dir)


@pytest.fixture
def cloned_repo(tmp_path: Path) -> Generator[Path, None, None]:
    """Create a server repository and a clone of it.

    The server has ``master`` plus the ``dev.branch`` and ``release.branch``
    branches; the clone tracks them as ``origin/*``.

    Yields:
        Path to the clone
    """
    server = tmp_path / "server"
    server.mkdir()
    run_git("init", "-q", "-b", "master", cwd=server)
    commit_file(server, "README.md", "# Server\n", "Initial commit")
    run_git("branch", "dev.branch", cwd=server)
    run_git("branch", "release.branch", cwd=server)

    client = tmp_path / "client"
    run_git("clone", "-q", str(server), str(client))

    orig_dir = os.getcwd()
    os.chdir(client)
    yield client
    os.chdir(orig_dir)


@pytest.fixture
def drip_ctx(cloned_repo: Path) -> DripContext:
    """DripContext for the clone, capturing output and commands."""
    return make_context(cloned_repo)


@pytest.fixture
def initialized_ctx(drip_ctx: DripContext) -> DripContext:
    """DripContext for a clone initialized with default settings."""
    Initializer(drip_ctx).run(defaults=True)
    clear_output(drip_ctx)
    return drip_ctx
