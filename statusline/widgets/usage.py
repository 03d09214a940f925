"""
UsageWidget — Context token usage as a progress bar

The bar fills with tokens / max_tokens (capped at 1) using the
green-to-red theme, followed by the raw token count at half opacity.
Renders nothing when the transcript holds no usage data.
"""

from typing import List

from ..config import UsageWidgetConfig
from ..presentation.colors import GRAY, LIGHT_SEA_GREEN
from ..presentation.progress import ProgressBarSpec, cells, green_to_red
from ..presentation.renderer import StyledText
from .base import Widget, WidgetContext


class UsageWidget(Widget):
    """Token budget consumed by the session."""

    name = "usage"

    @classmethod
    def default_config(cls):
        return UsageWidgetConfig()

    def render(self, context: WidgetContext) -> List[StyledText]:
        if not self.enabled:
            return []

        tokens = context.session.tokens
        if tokens < 0:
            return []

        cfg = self.config
        fraction = min(1.0, tokens / cfg.max_tokens)

        bar = cells(ProgressBarSpec(
            value=fraction,
            width=cfg.width,
            fill_glyph=context.symbols.fill_block,
            empty_glyph=context.symbols.empty_block,
            gradient=green_to_red,
            fill_color=LIGHT_SEA_GREEN,
            empty_color=GRAY,
            opacity=cfg.opacity,
        ))
        return bar + [self.text(f" {tokens}", opacity=cfg.opacity * 0.5)]
