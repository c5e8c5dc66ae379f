"""Tests for the Repository branch model."""

from pathlib import Path

import pytest

from gitdrip.constants import WorkingTreeStatus
from gitdrip.exceptions import BranchExistsError, BranchNotFoundError, DirtyTreeError
from gitdrip.git.repo import Repository, _listing_name
from gitdrip.git.types import Branch
from tests.helpers.git_helpers import commit_file, make_context, run_git


def _server(clone: Path) -> Path:
    return clone.parent / "server"


class TestListingName:
    """Tests for git branch output normalization."""

    def test_listing_name(self) -> None:
        """Test markers and symbolic ref arrows are removed."""
        assert _listing_name("* master") == "master"
        assert _listing_name("  feature/x") == "feature/x"
        assert _listing_name("  origin/HEAD -> origin/master") == "origin/HEAD"


class TestRepositoryState:
    """Tests for repository location and working tree state."""

    def test_git_dir_and_state_path(self, tmp_repo: Path) -> None:
        """Test the state file lives under the git dir."""
        repo = Repository(make_context(tmp_repo))
        assert repo.git_dir() == ".git"
        assert repo.state_path() == tmp_repo / ".git" / ".gitdrip" / "MERGE_BASE"

    def test_git_dir_outside_repository(self, tmp_path: Path) -> None:
        """Test no git dir outside a repository."""
        outside = tmp_path / "plain"
        outside.mkdir()
        assert Repository(make_context(outside)).git_dir() == ""

    def test_working_tree_status(self, tmp_repo: Path) -> None:
        """Test clean, unstaged and uncommitted are told apart."""
        repo = Repository(make_context(tmp_repo))
        assert repo.working_tree_status() is WorkingTreeStatus.CLEAN
        repo.require_clean_tree()

        (tmp_repo / "README.md").write_text("changed\n")
        assert repo.working_tree_status() is WorkingTreeStatus.UNSTAGED
        assert repo.has_unstaged_changes()
        with pytest.raises(DirtyTreeError, match="unstaged changes"):
            repo.require_clean_tree()

        run_git("add", "README.md", cwd=tmp_repo)
        assert repo.working_tree_status() is WorkingTreeStatus.UNCOMMITTED
        assert repo.has_staged_changes()
        with pytest.raises(DirtyTreeError, match="uncommitted changes"):
            repo.require_clean_tree()

    def test_untracked_files_are_clean(self, tmp_repo: Path) -> None:
        """Test untracked files do not make the tree dirty."""
        (tmp_repo / "scratch.txt").write_text("x\n")
        assert Repository(make_context(tmp_repo)).working_tree_status() is WorkingTreeStatus.CLEAN

    def test_headless_repository(self, tmp_path: Path) -> None:
        """Test a repository without commits is headless."""
        fresh = tmp_path / "fresh"
        fresh.mkdir()
        run_git("init", "-q", cwd=fresh)
        assert Repository(make_context(fresh)).is_headless()

    def test_no_conflicts(self, tmp_repo: Path) -> None:
        """Test a clean repository has no conflicting files."""
        assert Repository(make_context(tmp_repo)).conflicting_files() == []


class TestBranches:
    """Tests for branch queries."""

    def test_current_branch(self, tmp_repo: Path) -> None:
        """Test the checked out branch is reported."""
        repo = Repository(make_context(tmp_repo))
        assert repo.current_branch() == Branch("master")

    def test_current_branch_detached(self, tmp_repo: Path) -> None:
        """Test a detached checkout reports the HEAD sentinel."""
        run_git("checkout", "-q", "--detach", cwd=tmp_repo)
        repo = Repository(make_context(tmp_repo))

        current = repo.current_branch()
        assert current is not None
        assert current.detached_head
        names = [b.prefixed_name for b in repo.local_branches()]
        assert "HEAD" in names
        assert "master" in names

    def test_local_branches_use_prefixes(self, tmp_repo: Path) -> None:
        """Test configured prefixes are split off listed branches."""
        run_git("config", "gitdrip.prefix.feature", "feature/", cwd=tmp_repo)
        run_git("branch", "feature/foo", cwd=tmp_repo)
        repo = Repository(make_context(tmp_repo))

        assert Branch("foo", "feature/") in repo.local_branches()
        assert repo.prefixed_branches("feature/") == [Branch("foo", "feature/")]

    def test_branch_existence(self, tmp_repo: Path) -> None:
        """Test require_branch and require_branch_absent."""
        repo = Repository(make_context(tmp_repo))
        assert repo.branch_exists("master")
        assert not repo.branch_exists("nope")

        repo.require_branch(Branch("master"))
        with pytest.raises(BranchNotFoundError, match="does not exist and is required"):
            repo.require_branch(Branch("nope"))
        with pytest.raises(BranchExistsError, match="already exists. Pick another name"):
            repo.require_branch_absent(Branch("master"))

    def test_branch_description(self, tmp_repo: Path) -> None:
        """Test descriptions come from branch.<name>.description."""
        run_git("config", "branch.master.description", "Main line", cwd=tmp_repo)
        repo = Repository(make_context(tmp_repo))
        assert repo.branch_description(Branch("master")) == "Main line"

    def test_remote_branches(self, cloned_repo: Path) -> None:
        """Test remote-tracking branches are listed by short name."""
        repo = Repository(make_context(cloned_repo))
        remotes = repo.remote_branches()
        assert "origin/master" in remotes
        assert "origin/dev.branch" in remotes
        assert "origin/release.branch" in repo.origin_branches()
        assert repo.remote_contains("origin/dev.branch")
        assert not repo.remote_contains("origin/nope")


class TestUpstream:
    """Tests for upstream and pending commit queries."""

    def test_origin_branch(self, cloned_repo: Path) -> None:
        """Test a cloned branch tracks its remote counterpart."""
        repo = Repository(make_context(cloned_repo))
        assert repo.origin_branch(Branch("master")) == "origin/master"
        assert not repo.is_local_only(Branch("master"))

    def test_origin_branch_without_upstream(self, cloned_repo: Path) -> None:
        """Test a local branch falls back to the remote master."""
        run_git("branch", "--no-track", "topic", "master", cwd=cloned_repo)
        repo = Repository(make_context(cloned_repo))
        assert repo.origin_branch(Branch("topic")) == "origin/master"
        assert repo.is_local_only(Branch("topic"))

    def test_origin_branch_detached(self, cloned_repo: Path) -> None:
        """Test the detached sentinel maps to origin/HEAD."""
        repo = Repository(make_context(cloned_repo))
        assert repo.origin_branch(Branch("HEAD")) == "origin/HEAD"

    def test_load_pending_nothing_pending(self, cloned_repo: Path) -> None:
        """Test an up to date branch has no pending commits."""
        repo = Repository(make_context(cloned_repo))
        head = run_git("rev-parse", "HEAD", cwd=cloned_repo).strip()

        info = repo.load_pending(Branch("master"))
        assert info.origin_branch == "origin/master"
        assert info.commits_ahead == 0
        assert info.commits_behind == 0
        assert not info.has_pending_commit
        assert info.branchpoint == head

    def test_load_pending_commits(self, cloned_repo: Path) -> None:
        """Test pending commits, branch point and Change-Id."""
        base = run_git("rev-parse", "origin/master", cwd=cloned_repo).strip()
        commit_file(cloned_repo, "a.txt", "a\n", "First")
        commit_file(cloned_repo, "b.txt", "b\n", "Second\n\nChange-Id: Iabc123")
        repo = Repository(make_context(cloned_repo))

        info = repo.load_pending(Branch("master"))
        assert info.commits_ahead == 2
        assert info.branchpoint == base
        assert [c.subject for c in info.pending] == ["Second", "First"]
        assert info.pending[0].change_id == "Iabc123"
        assert info.pending[1].change_id == ""

    def test_load_pending_behind(self, cloned_repo: Path) -> None:
        """Test commits on the remote count as behind."""
        commit_file(_server(cloned_repo), "s.txt", "s\n", "Server side")
        run_git("fetch", "-q", cwd=cloned_repo)
        repo = Repository(make_context(cloned_repo))

        info = repo.load_pending(Branch("master"))
        assert info.commits_ahead == 0
        assert info.commits_behind == 1

    def test_load_pending_merge_branchpoint(self, cloned_repo: Path) -> None:
        """Test a merge of the upstream moves the branch point to the upstream tip."""
        remote_tip = commit_file(_server(cloned_repo), "s.txt", "s\n", "Server side")
        commit_file(cloned_repo, "a.txt", "a\n", "Local work")
        run_git("fetch", "-q", cwd=cloned_repo)
        run_git("merge", "-q", "--no-edit", "origin/master", cwd=cloned_repo)
        repo = Repository(make_context(cloned_repo))

        info = repo.load_pending(Branch("master"))
        assert info.pending[0].is_merge
        assert info.branchpoint == remote_tip
        assert info.commits_behind == 0

    def test_load_pending_merge_first_parent_upstream(self, cloned_repo: Path) -> None:
        """Test a merge whose first parent is the upstream tip moves the branch point there."""
        old_base = run_git("rev-parse", "HEAD", cwd=cloned_repo).strip()
        run_git("checkout", "-q", "-b", "topic", cwd=cloned_repo)
        commit_file(cloned_repo, "t.txt", "t\n", "Topic work")
        remote_tip = commit_file(_server(cloned_repo), "s.txt", "s\n", "Server side")
        run_git("fetch", "-q", cwd=cloned_repo)
        run_git("checkout", "-q", "-b", "work", "--track", "origin/master", cwd=cloned_repo)
        run_git("merge", "-q", "--no-ff", "--no-edit", "topic", cwd=cloned_repo)
        repo = Repository(make_context(cloned_repo))

        info = repo.load_pending(Branch("work"))
        assert info.origin_branch == "origin/master"
        assert info.commits_ahead == 2
        assert info.pending[0].is_merge
        assert info.pending[0].parent == remote_tip
        assert info.pending[1].parent == old_base
        assert info.branchpoint == remote_tip

    def test_is_merged_into(self, cloned_repo: Path) -> None:
        """Test containment checks local and remote-tracking branches."""
        run_git("branch", "topic", cwd=cloned_repo)
        repo = Repository(make_context(cloned_repo))
        assert repo.is_merged_into(Branch("topic"), "master")
        assert repo.is_merged_into(Branch("topic"), "origin/master")

        run_git("checkout", "-q", "topic", cwd=cloned_repo)
        commit_file(cloned_repo, "t.txt", "t\n", "Topic work")
        assert not repo.is_merged_into(Branch("topic"), "master")
