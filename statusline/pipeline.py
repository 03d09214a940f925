"""
Pipeline — Compose widgets into one status line

Widgets are evaluated in configured order. Each evaluation is a single
failure boundary: an exception becomes a WidgetOutcome carrying the
error, rendered inline as "[ExceptionType] message" in that widget's
slot. Other widgets are unaffected.

Separator rule: one separator between each pair of consecutive slots
that produced output. Empty slots contribute nothing, not even a
separator. A failed slot counts as output.

The line always ends with a style reset.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .logging_config import log_performance
from .presentation.colors import WHITE
from .presentation.renderer import Renderer, StyledText, exception_lines
from .widgets.base import Widget, WidgetContext


logger = logging.getLogger(__name__)

DEFAULT_SEPARATOR = " | "
DEFAULT_SEPARATOR_OPACITY = 0.8


@dataclass(frozen=True)
class WidgetOutcome:
    """Result of evaluating one widget: its units, or the error it raised."""
    name: str
    units: List[StyledText] = field(default_factory=list)
    error: Optional[Exception] = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def is_empty(self) -> bool:
        """Nothing to show: no units and no error."""
        return not self.units and self.error is None


class Pipeline:
    """Runs widgets and writes their output through a renderer."""

    def __init__(
        self,
        widgets: Sequence[Widget],
        renderer: Renderer,
        separator: Optional[StyledText] = None,
    ):
        self.widgets = list(widgets)
        self.renderer = renderer
        self.separator = separator or StyledText(
            DEFAULT_SEPARATOR, foreground=WHITE, opacity=DEFAULT_SEPARATOR_OPACITY,
        )

    def evaluate(self, widget: Widget, context: WidgetContext) -> WidgetOutcome:
        """Render one widget, capturing any exception it raises."""
        start = time.monotonic()
        try:
            units = list(widget.render(context))
        except Exception as e:
            logger.error("Widget %s failed: %s", widget.name, e, exc_info=True)
            return WidgetOutcome(name=widget.name, error=e)
        finally:
            log_performance(logger, f"widget.{widget.name}", time.monotonic() - start)
        return WidgetOutcome(name=widget.name, units=units)

    def units_for(self, outcome: WidgetOutcome) -> List[StyledText]:
        """Display units for an outcome; errors render as their first line."""
        if outcome.failed:
            return exception_lines(outcome.error)[0]
        return outcome.units

    def run(self, context: WidgetContext) -> List[WidgetOutcome]:
        """
        Evaluate every widget and write the composed line.

        Returns:
            One outcome per widget, in order
        """
        outcomes = []
        wrote_slot = False
        try:
            for widget in self.widgets:
                outcome = self.evaluate(widget, context)
                outcomes.append(outcome)

                units = self.units_for(outcome)
                if not units:
                    continue
                if wrote_slot:
                    self.renderer.write([self.separator])
                self.renderer.write(units)
                wrote_slot = True
        finally:
            self.renderer.write_reset()
        return outcomes
