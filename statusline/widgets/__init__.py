"""
Widgets — Independently failing units of the status line

Registry pattern: the variant set is closed and known. Names map to
classes here; display.widgets selects and orders them.
"""

from typing import Dict, List, Type, Sequence, TYPE_CHECKING

from .base import Widget, WidgetContext
from .project import ProjectWidget
from .repository import RepositoryWidget
from .usage import UsageWidget

if TYPE_CHECKING:
    from ..config import Config


WIDGET_TYPES: Dict[str, Type[Widget]] = {
    ProjectWidget.name: ProjectWidget,
    RepositoryWidget.name: RepositoryWidget,
    UsageWidget.name: UsageWidget,
}


def build_widgets(names: Sequence[str], config: "Config") -> List[Widget]:
    """
    Instantiate widgets in the given order.

    Raises:
        KeyError: Unknown widget name (config validation reports these first)
    """
    return [WIDGET_TYPES[name].from_config(config) for name in names]


__all__ = [
    "Widget", "WidgetContext", "WIDGET_TYPES", "build_widgets",
    "ProjectWidget", "RepositoryWidget", "UsageWidget",
]
