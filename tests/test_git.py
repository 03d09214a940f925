"""
Tests for Git Status — Repository snapshot

These tests validate:
- Porcelain status counting (staged/unstaged independence, conflicts)
- Ahead/behind and stash parsing
- Rebase/merge detection from git dir markers
- GitProbe assembly over scripted command results
- GitProbe against real temporary repositories

SKIP CONDITIONS:
- Tests marked 'requires_git' skip if git is not installed
"""

import subprocess

import pytest

from statusline.services.executor import CommandExecutor, CommandResult
from statusline.services.git import (
    GitProbe, RepositoryStatusSnapshot, PorcelainCounts,
    parse_porcelain_status, parse_ahead_behind, count_stashes, read_repository_state,
)
from tests.factories import FakeExecutor, git_is_available, git_responses


requires_git = pytest.mark.skipif(
    not git_is_available(),
    reason="Git is not installed or not available"
)


# ============================================================================
# FIXTURES
# ============================================================================

def _git(repo, *args):
    subprocess.run(["git", *args], cwd=repo, capture_output=True, check=True)


@pytest.fixture
def temp_git_repo(tmp_path):
    """Create a temporary git repository with one commit on 'main'."""
    if not git_is_available():
        pytest.skip("Git is not available")

    repo = tmp_path / "test_repo"
    repo.mkdir()

    try:
        _git(repo, "init")
        _git(repo, "symbolic-ref", "HEAD", "refs/heads/main")
        _git(repo, "config", "user.email", "test@test.com")
        _git(repo, "config", "user.name", "Test User")
        _git(repo, "config", "commit.gpgsign", "false")

        (repo / "README.md").write_text("# Test")
        _git(repo, "add", ".")
        _git(repo, "commit", "-m", "Initial commit")
        return repo
    except subprocess.CalledProcessError:
        pytest.skip("Could not create git repository")


@pytest.fixture
def non_git_dir(tmp_path):
    d = tmp_path / "not_git"
    d.mkdir()
    return d


# ============================================================================
# PORCELAIN PARSING
# ============================================================================

class TestParsePorcelain:
    """Two-letter status prefix counting."""

    def test_mixed_output(self):
        counts = parse_porcelain_status([
            "?? bar.txt",
            " M foo.txt",
            "UU baz.txt",
            "MM both.txt",
        ])
        assert counts == PorcelainCounts(staged=1, unstaged=2, untracked=1, conflict=1)

    def test_staged_and_unstaged_are_independent(self):
        counts = parse_porcelain_status("MM both.txt")
        assert counts.staged == 1
        assert counts.unstaged == 1

    def test_conflicts_count_only_as_conflicts(self):
        counts = parse_porcelain_status("UU a\nAA b\nDD c")
        assert counts == PorcelainCounts(conflict=3)

    def test_untracked_not_staged(self):
        counts = parse_porcelain_status("?? new.txt")
        assert counts == PorcelainCounts(untracked=1)

    def test_worktree_only_change(self):
        counts = parse_porcelain_status(" D gone.txt")
        assert counts == PorcelainCounts(unstaged=1)

    def test_short_lines_ignored(self):
        assert parse_porcelain_status(["", "M"]) == PorcelainCounts()

    def test_empty_output(self):
        assert parse_porcelain_status("") == PorcelainCounts()


class TestParseAheadBehind:

    def test_tab_separated(self):
        """Output order is behind, then ahead."""
        assert parse_ahead_behind("2\t5") == (5, 2)

    def test_space_separated(self):
        assert parse_ahead_behind("0 1") == (1, 0)

    def test_garbage_defaults_to_zero(self):
        assert parse_ahead_behind("x\ty") == (0, 0)
        assert parse_ahead_behind("") == (0, 0)


class TestCountStashes:

    def test_counts_lines(self):
        assert count_stashes("stash@{0}: WIP\nstash@{1}: WIP\n") == 2

    def test_empty(self):
        assert count_stashes("") == 0


class TestRepositoryState:

    def test_rebase_directory(self, tmp_path):
        (tmp_path / "rebase-merge").mkdir()
        assert read_repository_state(tmp_path) == (True, False)

    def test_rebase_apply_directory(self, tmp_path):
        (tmp_path / "rebase-apply").mkdir()
        assert read_repository_state(tmp_path) == (True, False)

    def test_merge_head(self, tmp_path):
        (tmp_path / "MERGE_HEAD").write_text("abc123")
        assert read_repository_state(tmp_path) == (False, True)

    def test_nothing_in_progress(self, tmp_path):
        assert read_repository_state(tmp_path) == (False, False)


# ============================================================================
# SNAPSHOT
# ============================================================================

class TestSnapshot:

    def test_summary(self):
        snapshot = RepositoryStatusSnapshot(branch="main", staged=2, untracked=1, ahead=1)
        assert snapshot.summary() == "+2 ?1 ↑1"

    def test_clean(self):
        snapshot = RepositoryStatusSnapshot(branch="main")
        assert snapshot.is_clean
        assert snapshot.summary() == "clean"
        assert snapshot.counts() == []

    def test_counts_order(self):
        snapshot = RepositoryStatusSnapshot(stash=1, behind=2, conflict=1)
        assert [name for name, _ in snapshot.counts()] == ["conflict", "behind", "stash"]


class TestGitProbeScripted:
    """GitProbe over a scripted executor."""

    def test_full_snapshot(self, tmp_path):
        executor = FakeExecutor(git_responses(
            branch="main",
            porcelain="M  a.py\nA  b.py\n?? c.txt",
            upstream="origin/main",
            ahead=1,
            stashes=2,
        ))
        snapshot = GitProbe(executor, tmp_path).snapshot()

        assert snapshot.branch == "main"
        assert snapshot.is_detached is False
        assert snapshot.upstream == "origin/main"
        assert (snapshot.staged, snapshot.untracked, snapshot.ahead, snapshot.behind) == (2, 1, 1, 0)
        assert snapshot.stash == 2
        assert snapshot.has_uncommitted_changes is True
        assert snapshot.has_remote_changes is True

    def test_git_missing(self, tmp_path):
        executor = FakeExecutor(git_responses(), available=())
        assert GitProbe(executor, tmp_path).snapshot() is None
        assert executor.calls == []

    def test_not_a_repository(self, tmp_path):
        executor = FakeExecutor({})
        assert GitProbe(executor, tmp_path).snapshot() is None

    def test_detached_head(self, tmp_path):
        executor = FakeExecutor(git_responses(branch=None))
        snapshot = GitProbe(executor, tmp_path).snapshot()
        assert snapshot.branch is None
        assert snapshot.is_detached is True

    def test_symbolic_ref_timeout_keeps_default(self, tmp_path):
        executor = FakeExecutor(git_responses(branch="main"))
        executor.results["git symbolic-ref -q HEAD"] = CommandResult(
            command="git symbolic-ref -q HEAD",
            text="Command timed out after 2000ms",
            timed_out=True,
        )
        snapshot = GitProbe(executor, tmp_path).snapshot()
        assert snapshot.branch == "main"
        assert snapshot.is_detached is False

    def test_symbolic_ref_unexpected_exit_keeps_default(self, tmp_path):
        executor = FakeExecutor(git_responses(branch="main"))
        executor.results["git symbolic-ref -q HEAD"] = CommandResult(
            command="git symbolic-ref -q HEAD",
            text="Error: fatal: not a git repository",
            stderr="fatal: not a git repository",
            exit_code=128,
        )
        assert GitProbe(executor, tmp_path).snapshot().is_detached is False

    def test_no_upstream_skips_ahead_behind(self, tmp_path):
        executor = FakeExecutor(git_responses(branch="main"))
        snapshot = GitProbe(executor, tmp_path).snapshot()
        assert snapshot.upstream is None
        assert not any("rev-list" in c for c in executor.calls)

    def test_failed_status_keeps_defaults(self, tmp_path):
        responses = git_responses(branch="main")
        del responses["git status --porcelain"]
        snapshot = GitProbe(FakeExecutor(responses), tmp_path).snapshot()
        assert snapshot.branch == "main"
        assert snapshot.has_uncommitted_changes is False

    def test_relative_git_dir_state(self, tmp_path):
        (tmp_path / ".git").mkdir()
        (tmp_path / ".git" / "MERGE_HEAD").write_text("abc")
        executor = FakeExecutor(git_responses(branch="main", git_dir=".git"))
        snapshot = GitProbe(executor, tmp_path).snapshot()
        assert snapshot.is_merging is True
        assert snapshot.is_rebasing is False


# ============================================================================
# REAL REPOSITORIES (Requires git)
# ============================================================================

@requires_git
class TestGitProbeReal:
    """GitProbe against temporary repositories."""

    def test_clean_repository(self, temp_git_repo):
        snapshot = GitProbe(CommandExecutor(), temp_git_repo).snapshot()
        assert snapshot is not None
        assert snapshot.branch == "main"
        assert snapshot.is_clean

    def test_working_tree_changes(self, temp_git_repo):
        (temp_git_repo / "README.md").write_text("# Changed")
        (temp_git_repo / "new.txt").write_text("new")
        (temp_git_repo / "staged.txt").write_text("staged")
        _git(temp_git_repo, "add", "staged.txt")

        snapshot = GitProbe(CommandExecutor(), temp_git_repo).snapshot()
        assert snapshot.unstaged == 1
        assert snapshot.untracked == 1
        assert snapshot.staged == 1

    def test_detached_head(self, temp_git_repo):
        _git(temp_git_repo, "checkout", "--detach")
        snapshot = GitProbe(CommandExecutor(), temp_git_repo).snapshot()
        assert snapshot.is_detached is True
        assert snapshot.branch is None

    def test_stash(self, temp_git_repo):
        (temp_git_repo / "README.md").write_text("# Stashed")
        _git(temp_git_repo, "stash")
        snapshot = GitProbe(CommandExecutor(), temp_git_repo).snapshot()
        assert snapshot.stash == 1

    def test_non_git_directory(self, non_git_dir):
        assert GitProbe(CommandExecutor(), non_git_dir).snapshot() is None
