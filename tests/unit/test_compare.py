"""Tests for branch comparison."""

from pathlib import Path

import pytest

from gitdrip.constants import CompareStatus
from gitdrip.exceptions import DivergedBranchError, GitError
from gitdrip.git.compare import compare_branches, require_equal
from tests.helpers.git_helpers import commit_file, make_context, run_git, stderr_of


def _server_commit(clone: Path, name: str = "s.txt") -> None:
    commit_file(clone.parent / "server", name, "server\n", f"Server {name}")
    run_git("fetch", "-q", cwd=clone)


class TestCompareBranches:
    """Tests for compare_branches."""

    def test_same_ref_is_equal(self, cloned_repo: Path) -> None:
        """Test any ref compares equal to itself."""
        ctx = make_context(cloned_repo)
        for ref in ("master", "origin/master", "origin/dev.branch", "HEAD"):
            assert compare_branches(ctx, ref, ref) is CompareStatus.EQUAL

    def test_fresh_clone_is_equal(self, cloned_repo: Path) -> None:
        """Test master equals origin/master after cloning."""
        ctx = make_context(cloned_repo)
        assert compare_branches(ctx, "master", "origin/master") is CompareStatus.EQUAL

    def test_behind_then_fast_forward(self, cloned_repo: Path) -> None:
        """Test behind becomes equal after a fast-forward."""
        _server_commit(cloned_repo)
        ctx = make_context(cloned_repo)
        assert compare_branches(ctx, "master", "origin/master") is CompareStatus.BEHIND

        run_git("merge", "-q", "--ff-only", "origin/master", cwd=cloned_repo)
        assert compare_branches(ctx, "master", "origin/master") is CompareStatus.EQUAL

    def test_ahead(self, cloned_repo: Path) -> None:
        """Test local commits make the branch ahead."""
        commit_file(cloned_repo, "a.txt", "a\n", "Local")
        ctx = make_context(cloned_repo)
        assert compare_branches(ctx, "master", "origin/master") is CompareStatus.AHEAD

    def test_need_merge(self, cloned_repo: Path) -> None:
        """Test commits on both sides need a merge."""
        commit_file(cloned_repo, "a.txt", "a\n", "Local")
        _server_commit(cloned_repo)
        ctx = make_context(cloned_repo)
        assert compare_branches(ctx, "master", "origin/master") is CompareStatus.NEED_MERGE

    def test_no_common_ancestor(self, cloned_repo: Path) -> None:
        """Test unrelated histories are reported as such."""
        run_git("checkout", "-q", "--orphan", "unrelated", cwd=cloned_repo)
        commit_file(cloned_repo, "u.txt", "u\n", "Unrelated root")
        ctx = make_context(cloned_repo)
        assert compare_branches(ctx, "unrelated", "master") is CompareStatus.NO_COMMON_ANCESTOR

    def test_unknown_ref_raises(self, cloned_repo: Path) -> None:
        """Test an unresolvable ref is an error."""
        ctx = make_context(cloned_repo)
        with pytest.raises(GitError):
            compare_branches(ctx, "master", "origin/nope")


class TestRequireEqual:
    """Tests for require_equal."""

    def test_equal_is_silent(self, cloned_repo: Path) -> None:
        """Test equal refs pass without output."""
        ctx = make_context(cloned_repo)
        assert require_equal(ctx, "master", "origin/master") is CompareStatus.EQUAL
        assert stderr_of(ctx) == ""

    def test_ahead_warns(self, cloned_repo: Path) -> None:
        """Test being ahead only warns."""
        commit_file(cloned_repo, "a.txt", "a\n", "Local")
        ctx = make_context(cloned_repo)

        assert require_equal(ctx, "master", "origin/master") is CompareStatus.AHEAD
        assert "Branches 'master' and 'origin/master' have diverged." in stderr_of(ctx)
        assert "is ahead of 'origin/master'" in stderr_of(ctx)

    def test_behind_raises(self, cloned_repo: Path) -> None:
        """Test being behind is fatal and suggests a fast-forward."""
        _server_commit(cloned_repo)
        ctx = make_context(cloned_repo)

        with pytest.raises(DivergedBranchError, match="may be fast-forwarded") as exc_info:
            require_equal(ctx, "master", "origin/master")
        assert exc_info.value.status == CompareStatus.BEHIND.value

    def test_need_merge_raises(self, cloned_repo: Path) -> None:
        """Test diverged refs are fatal."""
        commit_file(cloned_repo, "a.txt", "a\n", "Local")
        _server_commit(cloned_repo)
        ctx = make_context(cloned_repo)

        with pytest.raises(DivergedBranchError, match="Branches need merging first."):
            require_equal(ctx, "master", "origin/master")
