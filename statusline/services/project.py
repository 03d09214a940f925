"""
Project Identity — What project is this workspace?

Detection order:
1. Solution-file markers in the project directory (*.sln, *.slnx)
2. `dotnet sln list` when the dotnet CLI is available

One match yields a name; several yield a count. No match yields None and
the project widget falls back to the directory name.
"""

import logging
from dataclasses import dataclass
from pathlib import Path, PurePath
from typing import Optional, Sequence, List

from .executor import CommandExecutor


logger = logging.getLogger(__name__)

DEFAULT_MARKERS = ("*.sln", "*.slnx")
PROJECT_FILE_SUFFIXES = (".csproj", ".fsproj", ".vbproj")
TOOL_TIMEOUT_MS = 2000


@dataclass(frozen=True)
class ProjectIdentity:
    """Either a single project name or a count of projects."""
    count: int
    name: Optional[str] = None  # only meaningful when count == 1

    @property
    def is_single(self) -> bool:
        return self.count == 1 and bool(self.name)

    @property
    def display_text(self) -> str:
        if self.is_single:
            return self.name
        return f"{self.count} projects"

    @classmethod
    def from_paths(cls, paths: Sequence[str]) -> Optional["ProjectIdentity"]:
        """Identity for a list of project/solution paths; None if empty."""
        if not paths:
            return None
        if len(paths) == 1:
            return cls(count=1, name=PurePath(paths[0].replace("\\", "/")).stem)
        return cls(count=len(paths))


class ProjectProbe:
    """Detects the project identity for a directory."""

    def __init__(
        self,
        executor: CommandExecutor,
        project_dir: Path,
        markers: Sequence[str] = DEFAULT_MARKERS,
    ):
        self.executor = executor
        self.project_dir = Path(project_dir)
        self.markers = tuple(markers)

    def detect(self) -> Optional[ProjectIdentity]:
        identity = ProjectIdentity.from_paths(self._marker_files())
        if identity is not None:
            return identity
        return ProjectIdentity.from_paths(self._solution_projects())

    def _marker_files(self) -> List[str]:
        found = set()
        try:
            for pattern in self.markers:
                found.update(str(p) for p in self.project_dir.glob(pattern) if p.is_file())
        except OSError as e:
            logger.debug("Could not scan %s: %s", self.project_dir, e)
            return []
        return sorted(found)

    def _solution_projects(self) -> List[str]:
        if not self.executor.is_available("dotnet"):
            return []

        result = self.executor.run("dotnet sln list", cwd=self.project_dir, timeout_ms=TOOL_TIMEOUT_MS)
        if not result.ok:
            logger.debug("dotnet sln list failed: %s", result.text)
            return []
        return [
            line.strip() for line in result.lines
            if line.strip().endswith(PROJECT_FILE_SUFFIXES)
        ]
