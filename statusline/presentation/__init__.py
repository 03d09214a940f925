"""
Presentation — Display layer for the status line

Contains display and formatting:
- Colors: RGB values, NO_COLOR sentinel, alpha blending
- Symbols: Glyph vocabulary (nerd/unicode/ascii)
- Renderer: StyledText to ANSI escape sequences
- Progress: Gradient progress bars
"""

from .colors import Color, NO_COLOR, blend, parse_color
from .symbols import (
    SymbolSet, get_symbols,
    safe_write, sanitize_control_chars,
    NERD, UNICODE, ASCII,
)
from .renderer import StyledText, Renderer, render, render_all, exception_lines, RESET
from .progress import ProgressBarSpec, cells, red_ramp, green_to_red, THEMES

__all__ = [
    # Colors
    "Color", "NO_COLOR", "blend", "parse_color",
    # Symbols
    "SymbolSet", "get_symbols", "safe_write", "sanitize_control_chars",
    "NERD", "UNICODE", "ASCII",
    # Renderer
    "StyledText", "Renderer", "render", "render_all", "exception_lines", "RESET",
    # Progress
    "ProgressBarSpec", "cells", "red_ramp", "green_to_red", "THEMES",
]
