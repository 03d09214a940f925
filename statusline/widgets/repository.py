"""
RepositoryWidget — Branch and working tree state

Shows the branch icon and name (or the commit icon and HEAD when
detached), followed by in-progress operations and change counters.
Renders nothing outside a repository or without git.
"""

from typing import List

from ..config import RepositoryWidgetConfig
from ..presentation.colors import Color, GRAY, RED, YELLOW, PURPLE, LIGHT_SEA_GREEN
from ..presentation.renderer import StyledText
from ..presentation.symbols import SymbolSet, sanitize_control_chars
from ..services.git import GitProbe, RepositoryStatusSnapshot
from .base import Widget, WidgetContext


# Counter colors, keyed by snapshot counter name
COUNT_COLORS = {
    "staged": LIGHT_SEA_GREEN,
    "unstaged": YELLOW,
    "untracked": GRAY,
    "conflict": RED,
    "ahead": Color(0, 191, 255),
    "behind": Color(0, 191, 255),
    "stash": PURPLE,
}


class RepositoryWidget(Widget):
    """Git repository state."""

    name = "repository"

    @classmethod
    def default_config(cls):
        return RepositoryWidgetConfig()

    def render(self, context: WidgetContext) -> List[StyledText]:
        if not self.enabled:
            return []

        probe = GitProbe(
            context.executor,
            context.working_dir,
            timeout_ms=context.config.commands.probe_timeout_ms,
        )
        snapshot = probe.snapshot()
        if snapshot is None:
            return []
        return self.units_for(snapshot, context.symbols)

    def units_for(self, snapshot: RepositoryStatusSnapshot, symbols: SymbolSet) -> List[StyledText]:
        """Units for an already-probed snapshot."""
        if snapshot.branch is None and not snapshot.is_detached:
            return []

        cfg = self.config
        if snapshot.is_detached or snapshot.branch is None:
            units = [
                self.text(symbols.commit, foreground=cfg.icon_color),
                self.text(f"{cfg.placeholder}HEAD"),
            ]
        else:
            units = [
                self.text(symbols.branch, foreground=cfg.icon_color),
                self.text(f"{cfg.placeholder}{sanitize_control_chars(snapshot.branch)}"),
            ]

        if cfg.show_repository_state:
            if snapshot.is_rebasing:
                units.append(self.text(f" {symbols.rebasing}", foreground=RED))
            if snapshot.is_merging:
                units.append(self.text(f" {symbols.merging}", foreground=RED))

        if cfg.show_file_status:
            counts = snapshot.counts()
            for name, count in counts:
                units.append(self.text(f" {getattr(symbols, name)}{count}", foreground=COUNT_COLORS[name]))
            if not counts and cfg.show_clean_status:
                units.append(self.text(f" {symbols.clean}", foreground=LIGHT_SEA_GREEN))

        return units
