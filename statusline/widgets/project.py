"""
ProjectWidget — Project identity

Solution detected: solution icon + project name (or "N projects").
Otherwise: folder icon + project directory name.
Needs the input payload; renders nothing without it.
"""

from typing import List

from ..config import ProjectWidgetConfig
from ..presentation.renderer import StyledText
from ..presentation.symbols import sanitize_control_chars
from ..services.project import ProjectProbe
from .base import Widget, WidgetContext


class ProjectWidget(Widget):
    """Project name, solution count or folder name."""

    name = "project"

    @classmethod
    def default_config(cls):
        return ProjectWidgetConfig()

    def render(self, context: WidgetContext) -> List[StyledText]:
        if not self.enabled or not context.session.has_input:
            return []

        cfg = self.config
        identity = ProjectProbe(context.executor, context.working_dir, cfg.markers).detect()

        if identity is not None:
            icon = context.symbols.solution
            label = identity.display_text
        else:
            project_dir = context.session.project_dir
            if project_dir is None or not project_dir.name:
                return []
            icon = context.symbols.folder
            label = project_dir.name

        units = []
        if cfg.show_icon:
            units.append(self.text(icon, foreground=cfg.icon_color))
        units.append(self.text(f"{cfg.separator}{sanitize_control_chars(label)}"))
        return units
