"""
Tests for Project Identity — Solution detection
"""

from statusline.services.project import ProjectIdentity, ProjectProbe
from tests.factories import FakeExecutor


class TestProjectIdentity:

    def test_single_path(self):
        identity = ProjectIdentity.from_paths(["/work/App.sln"])
        assert identity.is_single
        assert identity.display_text == "App"

    def test_windows_separators(self):
        assert ProjectIdentity.from_paths(["src\\Web\\Web.csproj"]).name == "Web"

    def test_count(self):
        assert ProjectIdentity.from_paths(["a.sln", "b.sln", "c.sln"]).display_text == "3 projects"

    def test_empty(self):
        assert ProjectIdentity.from_paths([]) is None


class TestProjectProbe:

    def test_marker_files_first(self, tmp_path):
        (tmp_path / "Main.sln").write_text("")
        executor = FakeExecutor(available=("dotnet",))
        assert ProjectProbe(executor, tmp_path).detect().name == "Main"
        assert executor.calls == []

    def test_marker_directories_ignored(self, tmp_path):
        (tmp_path / "odd.sln").mkdir()
        assert ProjectProbe(FakeExecutor(available=()), tmp_path).detect() is None

    def test_custom_markers(self, tmp_path):
        (tmp_path / "pyproject.toml").write_text("")
        probe = ProjectProbe(FakeExecutor(available=()), tmp_path, markers=["pyproject.toml"])
        assert probe.detect().name == "pyproject"

    def test_dotnet_failure(self, tmp_path):
        executor = FakeExecutor(available=("dotnet",))
        assert ProjectProbe(executor, tmp_path).detect() is None
        assert executor.calls == ["dotnet sln list"]
