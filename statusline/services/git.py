"""
Git Status — Repository state snapshot for the status line

Turns raw git output into a RepositoryStatusSnapshot:
- Porcelain status lines -> staged/unstaged/untracked/conflict counts
- rev-list --left-right counts -> ahead/behind
- stash list -> stash count
- marker files in the git dir -> rebasing/merging flags

Partial results, not failure: every sub-probe that fails (tool absent,
non-zero exit, unexpected format) is skipped and its fields keep their
defaults. Nothing raises out of GitProbe.snapshot().
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, List, Tuple, Iterable, Union

from .executor import CommandExecutor


logger = logging.getLogger(__name__)

# Two-letter prefixes that mark an unresolved merge conflict
CONFLICT_MARKERS = ("UU", "AA", "DD")
UNTRACKED_MARKER = "??"

# Marker entries inside the git dir
REBASE_MARKERS = ("rebase-merge", "rebase-apply")
MERGE_MARKER = "MERGE_HEAD"

PROBE_TIMEOUT_MS = 2000
STATUS_TIMEOUT_MS = 3000
GIT_DIR_TIMEOUT_MS = 1000

# Display marks for summary(), in display order
SUMMARY_MARKS = (
    ("staged", "+"),
    ("unstaged", "~"),
    ("untracked", "?"),
    ("conflict", "!"),
    ("ahead", "↑"),
    ("behind", "↓"),
    ("stash", "$"),
)


@dataclass(frozen=True)
class PorcelainCounts:
    """File counts from one pass over porcelain status output."""
    staged: int = 0
    unstaged: int = 0
    untracked: int = 0
    conflict: int = 0


@dataclass(frozen=True)
class RepositoryStatusSnapshot:
    """Fully resolved repository state from one probe pass."""
    branch: Optional[str] = None        # None when detached
    is_detached: bool = False
    upstream: Optional[str] = None

    ahead: int = 0
    behind: int = 0

    staged: int = 0
    unstaged: int = 0
    untracked: int = 0
    conflict: int = 0
    stash: int = 0

    is_rebasing: bool = False
    is_merging: bool = False

    @property
    def has_uncommitted_changes(self) -> bool:
        return self.staged > 0 or self.unstaged > 0 or self.untracked > 0 or self.conflict > 0

    @property
    def has_remote_changes(self) -> bool:
        return self.ahead > 0 or self.behind > 0

    @property
    def has_upstream(self) -> bool:
        return self.upstream is not None

    @property
    def is_clean(self) -> bool:
        return not self.has_uncommitted_changes and not self.has_remote_changes

    def counts(self) -> List[Tuple[str, int]]:
        """Non-zero counters in display order as (name, count)."""
        return [(name, getattr(self, name)) for name, _ in SUMMARY_MARKS if getattr(self, name) > 0]

    def summary(self) -> str:
        """Compact text form, e.g. "+2 ?1 ↑1", or "clean"."""
        marks = dict(SUMMARY_MARKS)
        parts = [f"{marks[name]}{count}" for name, count in self.counts()]
        return " ".join(parts) if parts else "clean"


# =============================================================================
# Parsers (pure)
# =============================================================================

def parse_porcelain_status(output: Union[str, Iterable[str]]) -> PorcelainCounts:
    """
    Count file states in `git status --porcelain` output.

    Per line, XY is the two-letter prefix (X = index, Y = worktree):
    1. XY in UU/AA/DD     -> conflict only
    2. X not space or '?' -> staged
    3. Y not space or '?' -> unstaged (independent of 2: "MM" counts both)
    4. XY == "??"         -> untracked

    Args:
        output: Raw output text or an iterable of lines

    Returns:
        PorcelainCounts for all lines with at least two characters
    """
    lines = output.splitlines() if isinstance(output, str) else output

    staged = unstaged = untracked = conflict = 0
    for line in lines:
        if len(line) < 2:
            continue
        prefix = line[:2]
        x, y = prefix[0], prefix[1]

        if prefix in CONFLICT_MARKERS:
            conflict += 1
            continue

        if x not in (" ", "?"):
            staged += 1
        if y not in (" ", "?"):
            unstaged += 1
        if prefix == UNTRACKED_MARKER:
            untracked += 1

    return PorcelainCounts(staged=staged, unstaged=unstaged, untracked=untracked, conflict=conflict)


def parse_ahead_behind(output: str) -> Tuple[int, int]:
    """
    Parse `git rev-list --count --left-right @{upstream}...HEAD`.

    The output is "behind<TAB>ahead". Each side defaults to 0 when it
    cannot be parsed.

    Returns:
        (ahead, behind)
    """
    parts = output.strip().split("\t") if output else []
    if len(parts) < 2:
        parts = output.split() if output else []
    if len(parts) < 2:
        return 0, 0
    return _non_negative_int(parts[1]), _non_negative_int(parts[0])


def count_stashes(output: str) -> int:
    """Number of non-empty lines in `git stash list` output."""
    if not output:
        return 0
    return sum(1 for line in output.splitlines() if line.strip())


def read_repository_state(git_dir: Path) -> Tuple[bool, bool]:
    """
    Detect in-progress operations from marker entries in the git dir.

    Returns:
        (is_rebasing, is_merging)
    """
    is_rebasing = any((git_dir / marker).exists() for marker in REBASE_MARKERS)
    is_merging = (git_dir / MERGE_MARKER).exists()
    return is_rebasing, is_merging


def _non_negative_int(text: str) -> int:
    try:
        return max(0, int(text.strip()))
    except ValueError:
        return 0


# =============================================================================
# Probe
# =============================================================================

class GitProbe:
    """Builds a RepositoryStatusSnapshot by running git in a working directory."""

    def __init__(
        self,
        executor: CommandExecutor,
        repo_path: Optional[Path] = None,
        timeout_ms: int = PROBE_TIMEOUT_MS,
    ):
        """
        Initialize git probe.

        Args:
            executor: Bounded command runner
            repo_path: Directory to probe. If None, uses current directory.
            timeout_ms: Deadline for each small git query
        """
        self.executor = executor
        self.repo_path = Path(repo_path) if repo_path else Path.cwd()
        self.timeout_ms = timeout_ms

    def _git(self, args: str, timeout_ms: Optional[int] = None):
        return self.executor.run(
            f"git {args}",
            cwd=self.repo_path,
            timeout_ms=timeout_ms or self.timeout_ms,
        )

    def is_repository(self) -> bool:
        if not self.executor.is_available("git"):
            return False
        result = self._git("rev-parse --is-inside-work-tree")
        return result.ok and result.stdout.strip() == "true"

    def snapshot(self) -> Optional[RepositoryStatusSnapshot]:
        """
        Probe the repository.

        Returns:
            Snapshot (possibly partial), or None when git is absent or
            the directory is not inside a work tree
        """
        if not self.is_repository():
            return None

        branch = self._branch()
        upstream = self._upstream()
        counts = self._status()
        ahead, behind = self._ahead_behind() if upstream else (0, 0)
        is_rebasing, is_merging = self._repository_state()

        return RepositoryStatusSnapshot(
            branch=branch,
            is_detached=self._is_detached(),
            upstream=upstream,
            ahead=ahead,
            behind=behind,
            staged=counts.staged,
            unstaged=counts.unstaged,
            untracked=counts.untracked,
            conflict=counts.conflict,
            stash=self._stash_count(),
            is_rebasing=is_rebasing,
            is_merging=is_merging,
        )

    # -------------------------------------------------------------------------
    # Sub-probes: each returns its default on failure
    # -------------------------------------------------------------------------

    def _branch(self) -> Optional[str]:
        result = self._git("branch --show-current")
        branch = result.stdout.strip()
        if result.ok and branch:
            return branch
        return None

    def _is_detached(self) -> bool:
        # symbolic-ref -q exits 1 without output when HEAD is detached;
        # anything else (timeout, other codes) keeps the default
        result = self._git("symbolic-ref -q HEAD")
        return (
            result.exit_code == 1
            and not result.timed_out
            and result.error is None
            and not result.stdout.strip()
        )

    def _upstream(self) -> Optional[str]:
        result = self._git("rev-parse --abbrev-ref @{upstream}")
        upstream = result.stdout.strip()
        if result.ok and upstream:
            return upstream
        logger.debug("No upstream: %s", result.text)
        return None

    def _status(self) -> PorcelainCounts:
        result = self._git("status --porcelain", timeout_ms=STATUS_TIMEOUT_MS)
        if not result.ok:
            logger.debug("git status failed: %s", result.text)
            return PorcelainCounts()
        return parse_porcelain_status(result.stdout)

    def _ahead_behind(self) -> Tuple[int, int]:
        result = self._git("rev-list --count --left-right @{upstream}...HEAD")
        if not result.ok:
            return 0, 0
        return parse_ahead_behind(result.stdout)

    def _stash_count(self) -> int:
        result = self._git("stash list")
        if not result.ok:
            return 0
        return count_stashes(result.stdout)

    def _repository_state(self) -> Tuple[bool, bool]:
        result = self._git("rev-parse --git-dir", timeout_ms=GIT_DIR_TIMEOUT_MS)
        git_dir_text = result.stdout.strip()
        if not result.ok or not git_dir_text:
            return False, False

        git_dir = Path(git_dir_text)
        if not git_dir.is_absolute():
            git_dir = self.repo_path / git_dir
        try:
            return read_repository_state(git_dir)
        except OSError as e:
            logger.debug("Could not read repository state in %s: %s", git_dir, e)
            return False, False
