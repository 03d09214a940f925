"""
Colors — 24-bit RGB values for terminal rendering

Colors are plain (r, g, b) tuples. "No color" is an explicit sentinel
(NO_COLOR) rather than None, so renderers always have a value to test.

Also provides:
- blend(): linear alpha blending of a foreground into a background
- parse_color(): tolerant parsing of config values ("#rrggbb", "r,g,b", names)
"""

from typing import NamedTuple, Any


class Color(NamedTuple):
    """RGB color with channels in [0, 255]."""
    r: int
    g: int
    b: int

    @property
    def is_empty(self) -> bool:
        """True for the NO_COLOR sentinel."""
        return self.r < 0 or self.g < 0 or self.b < 0

    def to_hex(self) -> str:
        if self.is_empty:
            return ""
        return f"#{self.r:02x}{self.g:02x}{self.b:02x}"


NO_COLOR = Color(-1, -1, -1)

WHITE = Color(255, 255, 255)
BLACK = Color(0, 0, 0)
RED = Color(255, 0, 0)
YELLOW = Color(255, 255, 0)
PURPLE = Color(128, 0, 128)
GRAY = Color(128, 128, 128)
LIGHT_SEA_GREEN = Color(32, 178, 170)

NAMED_COLORS = {
    "white": WHITE,
    "black": BLACK,
    "red": RED,
    "yellow": YELLOW,
    "purple": PURPLE,
    "gray": GRAY,
    "grey": GRAY,
    "lightseagreen": LIGHT_SEA_GREEN,
    "green": Color(0, 128, 0),
    "blue": Color(0, 0, 255),
    "cyan": Color(0, 255, 255),
    "orange": Color(255, 165, 0),
}


def _clamp_channel(value: float) -> int:
    return max(0, min(255, int(value)))


def blend(fg: Color, bg: Color, alpha: float) -> Color:
    """
    Mix foreground into background using alpha blending.

    Args:
        fg: Foreground color
        bg: Background color
        alpha: 0.0 = fully background, 1.0 = fully foreground (clamped)

    Returns:
        Blended color, channels truncated to integers
    """
    alpha = max(0.0, min(1.0, alpha))
    return Color(
        _clamp_channel(bg.r * (1 - alpha) + fg.r * alpha),
        _clamp_channel(bg.g * (1 - alpha) + fg.g * alpha),
        _clamp_channel(bg.b * (1 - alpha) + fg.b * alpha),
    )


def parse_color(value: Any) -> Color:
    """
    Parse a color from configuration.

    Accepts Color, "#rrggbb", "r,g,b", [r, g, b] or a named color.
    Anything unparseable becomes NO_COLOR.
    """
    if isinstance(value, Color):
        return value
    if isinstance(value, (list, tuple)) and len(value) == 3:
        try:
            channels = [int(c) for c in value]
        except (TypeError, ValueError):
            return NO_COLOR
        if all(0 <= c <= 255 for c in channels):
            return Color(*channels)
        return NO_COLOR
    if not isinstance(value, str):
        return NO_COLOR

    text = value.strip().lower()
    if text in NAMED_COLORS:
        return NAMED_COLORS[text]
    if text.startswith("#") and len(text) == 7:
        try:
            return Color(int(text[1:3], 16), int(text[3:5], 16), int(text[5:7], 16))
        except ValueError:
            return NO_COLOR
    if "," in text:
        return parse_color(text.split(","))
    return NO_COLOR
