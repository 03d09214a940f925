"""
ProgressBar — Continuous value as a row of colored glyphs

Each cell i of a bar of width w sits at position p = i / (w - 1), so the
first cell is at 0 and the last at 1. A cell is filled iff p <= value.
Filled cells take their color from a gradient evaluated at p; empty cells
use a fixed neutral color, so the gradient only shows up to the boundary.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional

from .colors import Color, NO_COLOR, GRAY
from .renderer import StyledText


Gradient = Callable[[float], Color]


# Glyphs
EMPTY_BLOCK = "░"
EMPTY_CIRCLE = "○"
FILL_BLOCK = "▓"
FILL_FULL_BLOCK = "█"
FILL_CIRCLE = "●"


def red_ramp(position: float) -> Color:
    """Red intensity rising with position."""
    return Color(int(200 * position) + 50, 10, 10)


def green_to_red(position: float) -> Color:
    """Fixed red channel, green falling with position: lime to dark red."""
    return Color(160, 255 - int(250 * position), 0)


THEMES = {
    "red": red_ramp,
    "green_to_red": green_to_red,
}


@dataclass
class ProgressBarSpec:
    """Everything needed to draw one bar."""
    value: float = 0.0
    width: int = 20
    fill_glyph: str = FILL_FULL_BLOCK
    empty_glyph: str = EMPTY_BLOCK
    gradient: Optional[Gradient] = None
    fill_color: Color = NO_COLOR   # used when no gradient is set
    empty_color: Color = GRAY
    opacity: float = 1.0

    def __post_init__(self):
        if self.width <= 0:
            raise ValueError(f"Progress bar width must be > 0, got {self.width}")
        self.value = max(0.0, min(1.0, self.value))


def cell_position(index: int, width: int) -> float:
    """Fractional position of a cell; a single cell sits at 0."""
    if width <= 1:
        return 0.0
    return index / (width - 1)


def cells(spec: ProgressBarSpec) -> List[StyledText]:
    """
    Render a bar as one StyledText per cell, left to right.

    Example:
        >>> [c.content for c in cells(ProgressBarSpec(value=0.6, width=5, fill_glyph="#", empty_glyph="-"))]
        ['#', '#', '#', '-', '-']
    """
    result = []
    for index in range(spec.width):
        position = cell_position(index, spec.width)
        if position <= spec.value:
            color = spec.gradient(position) if spec.gradient else spec.fill_color
            glyph = spec.fill_glyph
        else:
            color = spec.empty_color
            glyph = spec.empty_glyph
        result.append(StyledText(glyph, foreground=color, opacity=spec.opacity))
    return result
