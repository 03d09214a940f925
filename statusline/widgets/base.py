"""
Widget — Abstract base class for status line widgets

A widget turns the run's context into zero or more StyledText units.
Each widget reads whatever external state it needs (repository snapshot,
project identity, token totals) and owns its visibility policy: when
there is nothing to show it returns an empty list.

All widgets inherit from this class and implement render().
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, TYPE_CHECKING

from ..core.session import SessionContext
from ..presentation.colors import Color, NO_COLOR
from ..presentation.renderer import StyledText
from ..presentation.symbols import SymbolSet, get_symbols
from ..services.executor import CommandExecutor

if TYPE_CHECKING:
    from ..config import Config


@dataclass
class WidgetContext:
    """Everything a widget may read during one run."""
    session: SessionContext
    config: "Config"
    executor: CommandExecutor
    symbols: SymbolSet = field(default_factory=get_symbols)
    cwd: Optional[Path] = None

    @property
    def working_dir(self) -> Path:
        """Project directory from the input, else the process directory."""
        return self.session.project_dir or self.cwd or Path.cwd()


class Widget(ABC):
    """
    Abstract base class for all widgets.

    Provides:
    - Registry name
    - Enablement from the widget's config section
    - text() helper applying the widget's opacity

    Subclasses must implement render() method.
    """

    name: str = ""

    def __init__(self, config=None):
        """
        Initialize widget.

        Args:
            config: The widget's config section (default: section defaults)
        """
        self.config = config if config is not None else self.default_config()

    @classmethod
    def default_config(cls):
        return None

    @classmethod
    def from_config(cls, config: "Config") -> "Widget":
        """Build the widget from its section of the application config."""
        return cls(getattr(config, cls.name, None))

    @property
    def enabled(self) -> bool:
        return getattr(self.config, "enabled", True)

    @property
    def opacity(self) -> float:
        return getattr(self.config, "opacity", 1.0)

    @abstractmethod
    def render(self, context: WidgetContext) -> List[StyledText]:
        """
        Produce this widget's units.

        Args:
            context: Session, config, executor and symbols for this run

        Returns:
            Units left to right; empty when the widget has nothing to show
        """
        pass

    def text(self, content: str, foreground: Color = NO_COLOR, opacity: Optional[float] = None) -> StyledText:
        return StyledText(
            content,
            foreground=foreground,
            opacity=self.opacity if opacity is None else opacity,
        )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r}>"
