"""
Renderer — ANSI output for styled text units

Every visible fragment of the status line is a StyledText. The renderer
turns it into a 24-bit SGR string (foreground + background escape, text,
reset) and writes it to the terminal stream.

Design principles:
- Rendering is pure formatting: no failure path
- Unset colors are the NO_COLOR sentinel, resolved to white/black here
- Opacity < 1 blends the foreground into the background
- Diagnostics use the same units, so they share the stream and the style
"""

import sys
import traceback
from dataclasses import dataclass
from typing import List, Iterable, Optional, TextIO

from .colors import Color, NO_COLOR, WHITE, BLACK, RED, YELLOW, blend
from .symbols import safe_write, sanitize_control_chars


RESET = "\x1b[0m"


@dataclass
class StyledText:
    """A run of text with its display style."""
    content: str = ""
    foreground: Color = NO_COLOR
    background: Color = NO_COLOR
    opacity: float = 1.0
    width: int = 0           # 0 = unconstrained
    left_align: bool = True  # only used when width > 0


def fit_width(content: str, width: int, left_align: bool = True) -> str:
    """
    Fit content into a fixed number of columns.

    Content at least as long as width is cut to exactly width characters.
    Shorter content is padded on the side opposite the alignment.
    """
    if width <= 0:
        return content
    if len(content) >= width:
        return content[:width]
    return content.ljust(width) if left_align else content.rjust(width)


def sgr_foreground(color: Color) -> str:
    return f"\x1b[38;2;{color.r};{color.g};{color.b}m"


def sgr_background(color: Color) -> str:
    return f"\x1b[48;2;{color.r};{color.g};{color.b}m"


def render(unit: StyledText) -> str:
    """
    Format a StyledText as an ANSI-escaped string.

    Returns:
        Foreground escape + background escape + text + reset
    """
    fg = WHITE if unit.foreground.is_empty else unit.foreground
    bg = BLACK if unit.background.is_empty else unit.background

    # Simulate transparency against the background
    if unit.opacity < 1:
        fg = blend(fg, bg, unit.opacity)

    text = fit_width(unit.content, unit.width, unit.left_align)
    return f"{sgr_foreground(fg)}{sgr_background(bg)}{text}{RESET}"


def render_all(units: Iterable[StyledText]) -> str:
    return "".join(render(u) for u in units)


def exception_lines(
    exc: BaseException,
    header: str = "",
    message: str = "",
    include_traceback: bool = False,
) -> List[List[StyledText]]:
    """
    Build the display lines for an exception.

    The first line is "[ExceptionType] message" in red. With
    include_traceback, the stack follows in dimmed white, and chained
    causes are appended recursively under a "Caused by:" label.

    Args:
        exc: Exception to format
        header: Custom header (default: "[TypeName]")
        message: Custom message (default: str(exc))
        include_traceback: Add stack frames and cause chain

    Returns:
        List of lines, each a list of StyledText units
    """
    display_header = header or f"[{type(exc).__name__}]"
    display_message = message or str(exc) or type(exc).__name__

    lines = [[
        StyledText(f"{display_header} ", foreground=RED, opacity=1.0),
        StyledText(display_message, foreground=RED, opacity=0.9),
    ]]

    if not include_traceback:
        return lines

    if exc.__traceback__ is not None:
        stack = "".join(traceback.format_tb(exc.__traceback__)).rstrip()
        for frame_line in stack.splitlines():
            lines.append([StyledText(frame_line, foreground=WHITE, opacity=0.6)])

    cause = exc.__cause__
    if cause is None and not exc.__suppress_context__:
        cause = exc.__context__
    if cause is not None:
        nested = exception_lines(cause, include_traceback=True)
        nested[0].insert(0, StyledText("  Caused by: ", foreground=YELLOW, opacity=0.8))
        lines.extend(nested)

    return lines


class Renderer:
    """Writes styled units to a terminal stream."""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream if stream is not None else sys.stdout

    def write_reset(self) -> None:
        safe_write(RESET, file=self.stream)

    def write(self, units: Iterable[StyledText]) -> None:
        """Write units left to right, each preceded by a style reset."""
        for unit in units:
            self.write_reset()
            safe_write(render(unit), file=self.stream)

    def write_lines(self, lines: List[List[StyledText]]) -> None:
        self.write_reset()
        for line in lines:
            self.write(line)
            safe_write("\n", file=self.stream)
        self.write_reset()

    def write_exception(
        self,
        exc: BaseException,
        header: str = "",
        message: str = "",
        include_traceback: bool = False,
    ) -> None:
        """Write a full diagnostic block for an exception."""
        self.write_lines(exception_lines(exc, header, message, include_traceback))

    def write_diagnostic(self, header: str, detail: str = "") -> None:
        """Write a diagnostic that is not tied to an exception."""
        lines = [[
            StyledText(f"{header} ", foreground=RED, opacity=1.0),
        ]]
        if detail:
            lines.append([StyledText(sanitize_detail(detail), foreground=RED, opacity=0.9)])
        self.write_lines(lines)

    def flush(self) -> None:
        flush = getattr(self.stream, "flush", None)
        if flush is not None:
            flush()


def sanitize_detail(detail: str) -> str:
    """Collapse a multi-line detail into one display line."""
    joined = " ".join(part.strip() for part in detail.splitlines() if part.strip())
    return sanitize_control_chars(joined)
