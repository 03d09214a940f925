"""
Services — External integration layer for the status line

Contains probes of the environment:
- Executor: Bounded shell command execution
- Git: Repository status snapshot
- Project: Project identity detection
"""

from .executor import CommandExecutor, CommandResult
from .git import (
    GitProbe, RepositoryStatusSnapshot, PorcelainCounts,
    parse_porcelain_status, parse_ahead_behind, count_stashes,
)
from .project import ProjectProbe, ProjectIdentity

__all__ = [
    # Executor
    "CommandExecutor", "CommandResult",
    # Git
    "GitProbe", "RepositoryStatusSnapshot", "PorcelainCounts",
    "parse_porcelain_status", "parse_ahead_behind", "count_stashes",
    # Project
    "ProjectProbe", "ProjectIdentity",
]
